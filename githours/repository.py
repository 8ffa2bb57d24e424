"""
.. module:: repository
   :platform: Unix, Windows
   :synopsis: A module for reading the commit history of a single git repository

.. moduleauthor:: Will McGinnis <will@pedalwrencher.com>


"""

import logging
import os
import shutil
import tempfile
from datetime import timedelta, timezone
from typing import NamedTuple

import pandas as pd
from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from pandas import DataFrame

from githours.errors import ReferenceNotFound, RepositoryUnreadable, ShallowClone
from githours.filter import build_ledger
from githours.logging import get_logger
from githours.result import aggregate

__author__ = "willmcginnis"

logger = get_logger("repository")

REMOTE_PREFIXES = ("git://", "https://", "http://")
SHALLOW_MESSAGE = "Cannot analyze shallow copies!\nPlease run git fetch --unshallow before continuing!"


def _authored_timestamp(commit):
    # author_tz_offset is in seconds west of UTC
    offset = timezone(timedelta(seconds=-commit.author_tz_offset))
    return pd.Timestamp(commit.authored_date, unit="s", tz="UTC").tz_convert(offset)


class CommitRecord(NamedTuple):
    """The fields of one commit that the hour estimate needs."""

    email: str
    name: str
    authored: pd.Timestamp
    message: str
    parent_count: int
    hexsha: str = ""

    @classmethod
    def from_commit(cls, commit):
        """Builds a record from a GitPython commit, keeping the author's own timezone offset."""
        return cls(
            email=commit.author.email,
            name=commit.author.name,
            authored=_authored_timestamp(commit),
            message=commit.message,
            parent_count=len(commit.parents),
            hexsha=commit.hexsha,
        )


class Repository:
    """A class for reading the commit history of a single git repository.

    Args:
        working_dir (Optional[str]): Path to the git repository:
            - If None: Uses current working directory
            - If local path: Path must be a git repository (work tree or bare)
            - If git URL: Repository will be cloned to a temporary directory
        verbose (bool, optional): Whether to print verbose output. Defaults to False.
        tmp_dir (Optional[str]): Directory to clone remote repositories into. Created if not provided.

    Attributes:
        verbose (bool): Whether verbose output is enabled
        git_dir (str): Path to the git repository
        repo (git.Repo): GitPython Repo instance

    Raises:
        RepositoryUnreadable: If the path does not exist, is not a git repository, or the clone fails

    Examples:
        >>> repo = Repository('/path/to/repo')
        >>> result = repo.hours_estimate(Config(branch='main'))
        >>> result.total.hours
        42
    """

    def __init__(self, working_dir=None, verbose=False, tmp_dir=None):
        self.verbose = verbose
        self.__delete_hook = False
        self._git_repo_name = None

        if working_dir is not None:
            working_dir = str(working_dir)

        try:
            if working_dir is not None and working_dir.startswith(REMOTE_PREFIXES):
                if tmp_dir is None:
                    if self.verbose:
                        print(f"cloning repository: {working_dir} into a temporary location")
                    dir_path = tempfile.mkdtemp()
                    self.__delete_hook = True
                else:
                    dir_path = tmp_dir

                # a full clone, since shallow histories cannot be estimated
                logger.info(f"Cloning remote repository {working_dir} to {dir_path}")
                self.git_dir = dir_path
                self.repo = Repo.clone_from(working_dir, dir_path)
                self._git_repo_name = working_dir.rstrip("/").split("/")[-1].split(".")[0]
            else:
                self.git_dir = working_dir if working_dir is not None else os.getcwd()
                self.repo = Repo(self.git_dir)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryUnreadable(f"failed to open repository at {working_dir or os.getcwd()}: {e}") from e
        except GitCommandError as e:
            raise RepositoryUnreadable(f"failed to clone repository {working_dir}: {e}") from e

        if self.verbose:
            print(f"Repository [{self._repo_name()}] instantiated at directory: {self.git_dir}")
        logger.info(f"Repository [{self._repo_name()}] instantiated at directory: {self.git_dir}")

    def __del__(self):
        """Removes the temporary clone of a remote repository, if one was made."""
        if getattr(self, "_Repository__delete_hook", False) and os.path.exists(self.git_dir):
            shutil.rmtree(self.git_dir, ignore_errors=True)

    def is_shallow(self):
        """Checks if this repository is a shallow clone.

        Shallow clones keep a ``shallow`` file listing the grafted commits. It lives in the common
        git directory, which linked worktrees share with their main checkout. Their history is
        truncated, so any hour estimate on them would be wrong.

        Returns:
            bool: True if the repository is shallow
        """
        return os.path.exists(os.path.join(self.repo.common_dir, "shallow"))

    def check_not_shallow(self):
        """Raises ShallowClone, a RepositoryUnreadable, if the repository is a shallow clone."""
        if self.is_shallow():
            logger.error(f"Repository [{self._repo_name()}] is a shallow clone")
            raise ShallowClone(SHALLOW_MESSAGE)

    def resolve_reference(self, branch=None):
        """Finds the commit the history walk starts from.

        Args:
            branch (Optional[str]): Local branch name. None or empty selects HEAD.

        Returns:
            git.Commit: The tip commit of the branch, or the commit HEAD points to

        Raises:
            ReferenceNotFound: If the branch does not exist or HEAD is unborn
        """
        if branch:
            try:
                return self.repo.heads[branch].commit
            except (IndexError, ValueError) as e:
                raise ReferenceNotFound(f"failed to get reference: branch '{branch}' not found") from e

        try:
            return self.repo.head.commit
        except ValueError as e:
            raise ReferenceNotFound(f"failed to get reference: HEAD cannot be resolved ({e})") from e

    def iter_commits(self, branch=None):
        """Yields the commits reachable from a branch, in git's traversal order.

        The history is read lazily, one commit at a time. The generator is forward-only and can be
        consumed once.

        Args:
            branch (Optional[str]): Local branch name. None or empty walks from HEAD.

        Yields:
            CommitRecord: One record per commit

        Raises:
            ReferenceNotFound: If the starting reference cannot be resolved
            RepositoryUnreadable: If git fails while walking the history
        """
        start = self.resolve_reference(branch)
        logger.info(f"Reading commit history of [{self._repo_name()}] from {branch or 'HEAD'} ({start.hexsha[:8]})")

        count = 0
        try:
            for commit in self.repo.iter_commits(start):
                count += 1
                if logger.isEnabledFor(logging.DEBUG) and count % 1000 == 0:
                    logger.debug(f"Read {count} commits...")
                yield CommitRecord.from_commit(commit)
        except (GitCommandError, ValueError) as e:
            raise RepositoryUnreadable(f"failed to process commits: {e}") from e

        logger.info(f"Finished reading {count} commits from [{self._repo_name()}]")

    def commit_history(self, branch=None):
        """Returns a DataFrame containing the commit history for a branch.

        Args:
            branch (Optional[str]): Local branch name. None or empty walks from HEAD.

        Returns:
            DataFrame: A DataFrame with columns:
                - date (datetime, index): Authored timestamp of the commit, in UTC
                - email (str): Email of the commit author
                - name (str): Name of the commit author
                - message (str): Commit message
                - parents (int): Number of parent commits
                - commit_sha (str): Commit hash
                - repository (str): Repository name
        """
        ds = [[x.authored, x.email, x.name, x.message, x.parent_count, x.hexsha] for x in self.iter_commits(branch)]
        df = DataFrame(ds, columns=["date", "email", "name", "message", "parents", "commit_sha"])
        df["date"] = pd.to_datetime(df["date"], utc=True)
        df = df.set_index("date")
        df["repository"] = self._repo_name()
        return df

    def hours_estimate(self, config):
        """Estimates the hours each author spent on this repository.

        Runs the whole analysis: the shallow clone check, the history walk from ``config.branch``,
        the commit filter and the per-author session estimate.

        Args:
            config (githours.config.Config): The run configuration. Its ``git_path`` is ignored,
                this repository is analyzed.

        Returns:
            githours.result.Result: Per author work plus the ``total`` entry

        Raises:
            ShallowClone: If the repository is a shallow clone
            RepositoryUnreadable: If its history cannot be read
            ReferenceNotFound: If the branch or HEAD cannot be resolved
        """
        self.check_not_shallow()
        ledger = build_ledger(self.iter_commits(config.branch), config)
        result = aggregate(ledger, config)
        logger.info(
            f"Finished hours estimation for [{self._repo_name()}]: {len(result.authors)} authors, "
            f"{result.total.commits} commits, {result.total.hours} hours"
        )
        return result

    @property
    def repo_name(self):
        return self._repo_name()

    def _repo_name(self):
        """Returns the name of the repository.

        For local repositories, uses the name of the directory holding the repository. For remote
        repositories, extracts the name from the URL.

        Returns:
            str: Name of the repository, or 'unknown_repo' if name can't be determined
        """
        if self._git_repo_name is not None:
            return self._git_repo_name

        path = self.repo.working_tree_dir or self.repo.git_dir
        reponame = os.path.basename(os.path.normpath(path))
        if reponame.endswith(".git") and self.repo.bare:
            reponame = reponame[: -len(".git")]
        if reponame.strip() == "":
            return "unknown_repo"
        return reponame

    def __str__(self):
        """Returns a human-readable string representation of the repository.

        Returns:
            str: String in format 'git repository: {name} at: {path}'
        """
        return f"git repository: {self._repo_name()} at: {self.git_dir}"

    def __repr__(self):
        return f"<Repository {self._repo_name()!r} at {self.git_dir!r}>"


__all__ = ["CommitRecord", "Repository", "SHALLOW_MESSAGE"]
