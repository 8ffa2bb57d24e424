"""
.. module:: filter
   :platform: Unix, Windows
   :synopsis: Decides which commits count towards the estimate and groups them by author

"""

import logging

from githours.config import MergeDetection
from githours.logging import get_logger

__author__ = "willmcginnis"

logger = get_logger("filter")

MERGE_MESSAGE_PREFIX = "Merge "


def is_merge(commit, detection=MergeDetection.MESSAGE_PREFIX):
    """Checks if a commit is a merge commit.

    Args:
        commit (CommitRecord): The commit to classify
        detection (MergeDetection): MESSAGE_PREFIX looks for a message starting with ``"Merge "``,
            PARENT_COUNT looks for two or more parents

    Returns:
        bool: True if the commit is a merge under the chosen strategy
    """
    if detection is MergeDetection.PARENT_COUNT:
        return commit.parent_count >= 2
    return commit.message.startswith(MERGE_MESSAGE_PREFIX)


def accept(commit, config):
    """Checks if a commit passes the merge and date filters, in that order.

    Both date bounds are inclusive: only commits strictly before ``since`` or strictly after
    ``until`` are rejected.
    """
    if not config.merge_request and is_merge(commit, config.merge_detection):
        return False
    if config.since is not None and commit.authored < config.since:
        return False
    if config.until is not None and commit.authored > config.until:
        return False
    return True


def resolve_email(email, aliases):
    """Returns the canonical email for a raw author email, or the email itself if it has no alias."""
    return aliases.get(email, email)


class AuthorLedger:
    """Accepted commit timestamps grouped by canonical author email.

    Attributes:
        timestamps (dict): canonical email -> list of authored timestamps, in arrival order
        names (dict): canonical email -> author name on that identity's most recent accepted commit
        total_commits (int): number of accepted commits across all authors
    """

    def __init__(self):
        self.timestamps = {}
        self.names = {}
        self.total_commits = 0
        self._latest = {}

    def add(self, commit, email):
        """Records an accepted commit under the given canonical email."""
        self.timestamps.setdefault(email, []).append(commit.authored)
        self.total_commits += 1

        # history order is not chronological, so keep the name of the newest commit seen
        latest = self._latest.get(email)
        if latest is None or commit.authored > latest:
            self._latest[email] = commit.authored
            self.names[email] = commit.name

    def commits(self, email):
        """Returns the number of accepted commits for a canonical email."""
        return len(self.timestamps.get(email, ()))

    @property
    def authors(self):
        return list(self.timestamps)

    def __len__(self):
        return len(self.timestamps)

    def __contains__(self, email):
        return email in self.timestamps

    def __repr__(self):
        return f"<AuthorLedger authors={len(self)} commits={self.total_commits}>"


def build_ledger(commits, config):
    """Filters a commit stream and groups the survivors by canonical author.

    The stream is consumed once, in order. Rejected commits leave no trace in the ledger. Raw emails
    that alias to the same canonical email share one bucket.

    Args:
        commits (Iterable[CommitRecord]): Commits in the source's traversal order
        config (githours.config.Config): Merge, date window and alias settings

    Returns:
        AuthorLedger: The accepted commits grouped by author
    """
    ledger = AuthorLedger()
    seen = 0
    debug = logger.isEnabledFor(logging.DEBUG)

    for commit in commits:
        seen += 1
        if not accept(commit, config):
            if debug:
                logger.debug(f"Skipping commit {commit.hexsha[:8]} by {commit.email} at {commit.authored}")
            continue
        ledger.add(commit, resolve_email(commit.email, config.email_aliases))

    logger.info(f"Accepted {ledger.total_commits} of {seen} commits from {len(ledger)} authors")
    return ledger


__all__ = ["AuthorLedger", "accept", "build_ledger", "is_merge", "resolve_email", "MERGE_MESSAGE_PREFIX"]
