"""
Shared pytest fixtures for githours tests.
"""

import subprocess

import git
import pandas as pd
import pytest

__author__ = "willmcginnis"


def get_default_branch():
    """Get the system's default branch name for new repositories."""
    result = subprocess.run(
        ["git", "config", "--global", "init.defaultBranch"],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return "master"


def git_date(when):
    """Formats a timestamp as git's internal ``<epoch> <+hhmm>`` date, keeping its offset."""
    ts = pd.Timestamp(when)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    minutes = int(ts.utcoffset().total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{int(ts.timestamp())} {sign}{minutes // 60:02d}{minutes % 60:02d}"


@pytest.fixture(scope="session")
def default_branch():
    """Pytest fixture to get the default branch name."""
    return get_default_branch()


@pytest.fixture
def make_repo(tmp_path, default_branch):
    """Factory for local repositories with controlled authors, dates and messages.

    Each commit is a dict with ``email`` and ``when`` and optionally ``name``, ``message`` and
    ``parents`` (indices of earlier commits in the same list, for merges). Without ``parents`` a
    commit follows the previous one. Returns the path of the repository.
    """

    def _make(commits, name="repository1", branch=None):
        repo_path = tmp_path / name
        repo_path.mkdir()
        repo = git.Repo.init(repo_path)
        with repo.config_writer() as cw:
            cw.set_value("user", "name", "Test User")
            cw.set_value("user", "email", "test@example.com")
        repo.git.checkout("-b", branch or default_branch)

        made = []
        for i, c in enumerate(commits):
            (repo_path / "work.txt").write_text(f"change {i}\n")
            repo.index.add(["work.txt"])
            actor = git.Actor(c.get("name", c["email"].split("@")[0]), c["email"])
            parents = None
            if "parents" in c:
                parents = [made[p] for p in c["parents"]]
            made.append(
                repo.index.commit(
                    c.get("message", f"work {i}"),
                    parent_commits=parents,
                    author=actor,
                    committer=actor,
                    author_date=git_date(c["when"]),
                    commit_date=git_date(c["when"]),
                )
            )
        repo.close()
        return repo_path

    return _make


def pytest_addoption(parser):
    parser.addoption("--run-remote", action="store_true", default=False, help="run tests that clone from GitHub")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "remote: marks tests that need network access (enable with --run-remote)")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-remote"):
        return
    skip_remote = pytest.mark.skip(reason="needs --run-remote")
    for item in items:
        if "remote" in item.keywords:
            item.add_marker(skip_remote)
