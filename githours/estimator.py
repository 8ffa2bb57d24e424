"""
.. module:: estimator
   :platform: Unix, Windows
   :synopsis: Turns one author's commit timestamps into an estimate of hours worked

inspired by: https://github.com/kimmobrunfeldt/git-hours/blob/8aaeee237cb9d9028e7a2592a25ad8468b1f45e4/index.js#L114-L143

Commits closer together than ``max_commit_diff_in_minutes`` belong to one working session and are
credited the real time between them. A larger gap starts a new session, which is credited a fixed
``first_commit_addition_in_minutes`` instead of the idle time.

"""

import numpy as np
import pandas as pd
from pandas import DataFrame

from githours.config import DEFAULT_FIRST_COMMIT_ADD, DEFAULT_MAX_COMMIT_DIFF

__author__ = "willmcginnis"


def _sorted_index(timestamps):
    # naive timestamps are taken as UTC so they can be compared with aware ones
    return pd.DatetimeIndex(pd.to_datetime(list(timestamps), utc=True)).sort_values()


def _gap_minutes(index):
    return (index[1:] - index[:-1]).total_seconds().to_numpy() / 60.0


def _credited_minutes(gaps, max_commit_diff_in_minutes, first_commit_addition_in_minutes):
    return np.where(gaps < max_commit_diff_in_minutes, gaps, float(first_commit_addition_in_minutes))


def _round_hours(minutes):
    # halves round away from zero, minutes are never negative
    return int(np.floor(minutes / 60.0 + 0.5))


def estimate_hours(
    timestamps,
    max_commit_diff_in_minutes=DEFAULT_MAX_COMMIT_DIFF,
    first_commit_addition_in_minutes=DEFAULT_FIRST_COMMIT_ADD,
):
    """Estimates the hours one author worked from the timestamps of their commits.

    The input order does not matter, timestamps are sorted first. Identical timestamps give a zero
    gap and always count as the same session.

    Args:
        timestamps (Iterable[datetime]): Authored timestamps of one author's accepted commits
        max_commit_diff_in_minutes (int): Gaps below this are credited in full. Defaults to 120.
        first_commit_addition_in_minutes (int): Credit for every gap at or above the threshold.
            Defaults to 120.

    Returns:
        int: Estimated hours, rounded to the nearest hour. 0 for fewer than two timestamps.
    """
    timestamps = list(timestamps)
    if len(timestamps) < 2:
        return 0

    gaps = _gap_minutes(_sorted_index(timestamps))
    credited = _credited_minutes(gaps, max_commit_diff_in_minutes, first_commit_addition_in_minutes)
    return _round_hours(credited.sum())


def session_breakdown(
    timestamps,
    max_commit_diff_in_minutes=DEFAULT_MAX_COMMIT_DIFF,
    first_commit_addition_in_minutes=DEFAULT_FIRST_COMMIT_ADD,
):
    """Returns the working sessions found in one author's timestamps.

    Uses the same rules as :func:`estimate_hours`. The first session carries no startup credit;
    every later session starts with ``first_commit_addition_in_minutes``. Summing ``minutes`` and
    dividing by 60 gives the unrounded figure :func:`estimate_hours` rounds.

    Args:
        timestamps (Iterable[datetime]): Authored timestamps of one author's accepted commits
        max_commit_diff_in_minutes (int): Session threshold in minutes. Defaults to 120.
        first_commit_addition_in_minutes (int): Startup credit per new session. Defaults to 120.

    Returns:
        DataFrame: One row per session with columns:
            - start (datetime): First commit of the session, in UTC
            - end (datetime): Last commit of the session, in UTC
            - commits (int): Number of commits in the session
            - minutes (float): Minutes credited to the session
    """
    columns = ["start", "end", "commits", "minutes"]
    index = _sorted_index(timestamps)
    if len(index) == 0:
        return DataFrame(columns=columns)

    gaps = _gap_minutes(index)
    credited = _credited_minutes(gaps, max_commit_diff_in_minutes, first_commit_addition_in_minutes)

    # session id of every commit: the number of boundaries crossed before it
    boundaries = gaps >= max_commit_diff_in_minutes
    session = np.concatenate([[0], np.cumsum(boundaries)])
    # a gap is credited to the session of the commit it leads to
    minutes = np.concatenate([[0.0], credited])

    df = DataFrame({"ts": index, "session": session, "minutes": minutes})
    df = df.groupby("session").agg(
        start=("ts", "min"),
        end=("ts", "max"),
        commits=("ts", "size"),
        minutes=("minutes", "sum"),
    )
    return df.reset_index(drop=True)[columns]


__all__ = ["estimate_hours", "session_breakdown"]
