"""
.. module:: result
   :platform: Unix, Windows
   :synopsis: Per author hour estimates and the total that sums them

"""

import json
from collections.abc import Mapping
from typing import NamedTuple

from pandas import DataFrame

from githours.estimator import estimate_hours
from githours.logging import get_logger

__author__ = "willmcginnis"

logger = get_logger("result")

TOTAL_KEY = "total"


class AuthorWork(NamedTuple):
    """Work attributed to one canonical author, or to everybody for the total entry."""

    name: str
    hours: int
    commits: int

    def to_dict(self):
        return {"name": self.name, "hours": self.hours, "commits": self.commits}


class Result(Mapping):
    """Read-only mapping of canonical author email to :class:`AuthorWork`, plus ``"total"``.

    The total's hours are the sum of every author's independent estimate, so concurrent work by two
    people counts twice. It is a person-hours figure, not the project's wall-clock duration. The
    total's commits are the number of accepted commits.

    Args:
        authors (Mapping[str, AuthorWork]): Work per canonical email, without the total entry
        total_commits (Optional[int]): Accepted commit count. Defaults to the sum over authors.
    """

    def __init__(self, authors, total_commits=None):
        self._authors = dict(authors)
        if TOTAL_KEY in self._authors:
            raise ValueError(f"'{TOTAL_KEY}' is reserved and cannot be used as an author key")

        if total_commits is None:
            total_commits = sum(w.commits for w in self._authors.values())
        total_hours = sum(w.hours for w in self._authors.values())
        self._total = AuthorWork(name="", hours=total_hours, commits=total_commits)

    def __getitem__(self, key):
        if key == TOTAL_KEY:
            return self._total
        return self._authors[key]

    def __iter__(self):
        yield from self._authors
        yield TOTAL_KEY

    def __len__(self):
        return len(self._authors) + 1

    @property
    def authors(self):
        """Work per canonical author email, without the total entry."""
        return dict(self._authors)

    @property
    def total(self):
        return self._total

    def to_dict(self):
        """Returns plain nested dicts, ready for ``json.dumps``."""
        return {key: work.to_dict() for key, work in self.items()}

    def to_json(self, indent=2):
        """Serializes the result as indented JSON, emails sorted, fields as name, hours, commits."""
        data = {key: work.to_dict() for key, work in sorted(self.items())}
        return json.dumps(data, indent=indent)

    def to_frame(self):
        """Returns a DataFrame indexed by email with columns name, hours and commits, total row last."""
        ds = [[key, work.name, work.hours, work.commits] for key, work in self.items()]
        df = DataFrame(ds, columns=["email", "name", "hours", "commits"])
        return df.set_index("email")

    @classmethod
    def merge(cls, results):
        """Combines the results of several repositories author by author.

        Hours and commits add up, and the first non-empty name seen for an email is kept.

        Args:
            results (Iterable[Result]): Results to combine

        Returns:
            Result: The combined result
        """
        merged = {}
        total_commits = 0
        for result in results:
            total_commits += result.total.commits
            for email, work in result.authors.items():
                prior = merged.get(email)
                if prior is None:
                    merged[email] = work
                else:
                    merged[email] = AuthorWork(
                        name=prior.name or work.name,
                        hours=prior.hours + work.hours,
                        commits=prior.commits + work.commits,
                    )
        return cls(merged, total_commits=total_commits)

    def __eq__(self, other):
        if isinstance(other, Result):
            return self._authors == other._authors and self._total == other._total
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"<Result authors={len(self._authors)} hours={self._total.hours} commits={self._total.commits}>"


def aggregate(ledger, config):
    """Estimates every author in a ledger and adds the total entry.

    Args:
        ledger (githours.filter.AuthorLedger): Accepted commits grouped by canonical author
        config (githours.config.Config): Supplies the session thresholds

    Returns:
        Result: Work per author plus ``"total"``
    """
    authors = {}
    for email, timestamps in ledger.timestamps.items():
        hours = estimate_hours(
            timestamps,
            max_commit_diff_in_minutes=config.max_commit_diff_in_minutes,
            first_commit_addition_in_minutes=config.first_commit_addition_in_minutes,
        )
        authors[email] = AuthorWork(name=ledger.names.get(email, email), hours=hours, commits=len(timestamps))

    if TOTAL_KEY in authors:
        renamed = f"{TOTAL_KEY}@"
        while renamed in authors:
            renamed += "@"
        logger.warning(f"An author email is literally '{TOTAL_KEY}'; reporting it as '{renamed}'")
        authors[renamed] = authors.pop(TOTAL_KEY)

    return Result(authors, total_commits=ledger.total_commits)


__all__ = ["AuthorWork", "Result", "aggregate", "TOTAL_KEY"]
