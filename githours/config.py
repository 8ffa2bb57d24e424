"""
.. module:: config
   :platform: Unix, Windows
   :synopsis: Immutable run configuration and the parsers that build it from user input

"""

import dataclasses
import enum
import json
from collections.abc import Iterable, Mapping
from types import MappingProxyType

import pandas as pd

from githours.errors import ConfigurationError
from githours.logging import get_logger

__author__ = "willmcginnis"

logger = get_logger("config")

DEFAULT_MAX_COMMIT_DIFF = 120
DEFAULT_FIRST_COMMIT_ADD = 120
DEFAULT_MERGE_REQUEST = True
DEFAULT_GIT_PATH = "."
DATE_FORMAT = "%Y-%m-%d"

UNBOUNDED_TOKENS = ("", "always")
RELATIVE_TOKENS = ("today", "yesterday", "thisweek", "lastweek")


class MergeDetection(enum.Enum):
    """How a commit is recognised as a merge.

    MESSAGE_PREFIX matches commits whose message starts with ``"Merge "``. It is the historical
    behaviour and the default, even though it misses merges with custom messages and catches
    ordinary commits that happen to start with that word. PARENT_COUNT treats any commit with two
    or more parents as a merge.
    """

    MESSAGE_PREFIX = "prefix"
    PARENT_COUNT = "parents"


@dataclasses.dataclass(frozen=True)
class Config:
    """Settings for one analysis run. Build it once, then treat it as read-only.

    Args:
        max_commit_diff_in_minutes (int): Largest gap between two commits of one author that still
            counts as the same working session. Defaults to 120.
        first_commit_addition_in_minutes (int): Minutes credited whenever a new session starts.
            Defaults to 120.
        since (Optional[pandas.Timestamp]): Timezone aware lower bound, None for unbounded.
        until (Optional[pandas.Timestamp]): Timezone aware upper bound, None for unbounded.
        merge_request (bool): Whether merge commits are counted. Defaults to True.
        merge_detection (MergeDetection): Strategy used to recognise merge commits.
        git_path (str): Repository path or git URL. Defaults to the current directory.
        branch (Optional[str]): Local branch to analyze, None or empty for HEAD.
        email_aliases (Mapping[str, str]): Raw author email to canonical email.

    Raises:
        ConfigurationError: If a threshold is negative or not an integer, or a date bound is naive.
    """

    max_commit_diff_in_minutes: int = DEFAULT_MAX_COMMIT_DIFF
    first_commit_addition_in_minutes: int = DEFAULT_FIRST_COMMIT_ADD
    since: pd.Timestamp | None = None
    until: pd.Timestamp | None = None
    merge_request: bool = DEFAULT_MERGE_REQUEST
    merge_detection: MergeDetection = MergeDetection.MESSAGE_PREFIX
    git_path: str = DEFAULT_GIT_PATH
    branch: str | None = None
    email_aliases: Mapping[str, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        for field in ("max_commit_diff_in_minutes", "first_commit_addition_in_minutes"):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"{field} must be a non-negative integer, got {value!r}")

        for field in ("since", "until"):
            value = getattr(self, field)
            if value is None:
                continue
            value = pd.Timestamp(value)
            if value.tzinfo is None:
                raise ConfigurationError(f"{field} must be timezone aware, got {value}")
            object.__setattr__(self, field, value)

        if not isinstance(self.merge_detection, MergeDetection):
            try:
                object.__setattr__(self, "merge_detection", MergeDetection(self.merge_detection))
            except ValueError as e:
                raise ConfigurationError(f"Unknown merge detection strategy: {self.merge_detection!r}") from e

        object.__setattr__(self, "git_path", str(self.git_path))
        object.__setattr__(self, "email_aliases", MappingProxyType(dict(self.email_aliases)))

        if self.since is not None and self.until is not None and self.since > self.until:
            logger.warning(f"since ({self.since}) is after until ({self.until}); no commit will be accepted")

    def __hash__(self):
        values = tuple(getattr(self, f.name) for f in dataclasses.fields(self) if f.name != "email_aliases")
        return hash(values + (frozenset(self.email_aliases.items()),))

    def replace(self, **changes):
        """Returns a copy of this configuration with the given fields changed."""
        changes.setdefault("email_aliases", dict(self.email_aliases))
        return dataclasses.replace(self, **changes)


def _today(now=None):
    if now is None:
        now = pd.Timestamp.now(tz="UTC")
    now = pd.Timestamp(now)
    if now.tzinfo is None:
        now = now.tz_localize("UTC")
    return now.tz_convert("UTC").normalize()


def parse_date_input(token, now=None):
    """Resolves a date token to a UTC midnight, or None for an unbounded window edge.

    Args:
        token (Optional[str]): One of ``always``, ``today``, ``yesterday``, ``thisweek``,
            ``lastweek`` or an explicit ``YYYY-MM-DD`` date. None and the empty string mean
            ``always``.
        now (Optional[datetime]): Instant the relative tokens are resolved against. Defaults to the
            current time. Naive values are taken as UTC.

    Returns:
        Optional[pandas.Timestamp]: The resolved bound, at 00:00 UTC.

    Raises:
        ConfigurationError: If the token is neither a known keyword nor a valid date.

    Note:
        Weeks start on Sunday, so ``thisweek`` is the most recent Sunday (today included) and
        ``lastweek`` the Sunday before that.
    """
    token = (token or "").strip()
    if token in UNBOUNDED_TOKENS:
        return None

    if token in RELATIVE_TOKENS:
        today = _today(now)
        if token == "today":
            return today
        if token == "yesterday":
            return today - pd.Timedelta(days=1)
        # Monday is 0 for pandas, Sunday starts the week here
        since_sunday = (today.dayofweek + 1) % 7
        start_of_week = today - pd.Timedelta(days=since_sunday)
        if token == "thisweek":
            return start_of_week
        return start_of_week - pd.Timedelta(days=7)

    try:
        return pd.to_datetime(token, format=DATE_FORMAT).tz_localize("UTC")
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid date format: {token}. Expected one of "
            f"{', '.join(('always',) + RELATIVE_TOKENS)} or YYYY-MM-DD"
        ) from e


def parse_aliases(pairs: Iterable[str]) -> dict[str, str]:
    """Builds an alias table from ``RAW=CANONICAL`` strings.

    Raises:
        ConfigurationError: If a pair has no ``=`` or an empty side.
    """
    aliases = {}
    for pair in pairs:
        raw, sep, canonical = pair.partition("=")
        raw, canonical = raw.strip(), canonical.strip()
        if not sep or not raw or not canonical:
            raise ConfigurationError(f"Invalid alias {pair!r}. Expected RAW_EMAIL=CANONICAL_EMAIL")
        if raw in aliases and aliases[raw] != canonical:
            logger.warning(f"Alias for {raw} redefined from {aliases[raw]} to {canonical}")
        aliases[raw] = canonical
    return aliases


def load_aliases(path) -> dict[str, str]:
    """Reads an alias table from a JSON object of ``{raw_email: canonical_email}``.

    Raises:
        ConfigurationError: If the file cannot be read or does not hold a string to string object.
    """
    logger.debug(f"Loading email aliases from {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read aliases file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Aliases file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        raise ConfigurationError(f"Aliases file {path} must contain a JSON object mapping emails to emails")

    logger.info(f"Loaded {len(data)} email aliases from {path}")
    return data


__all__ = [
    "Config",
    "MergeDetection",
    "parse_date_input",
    "parse_aliases",
    "load_aliases",
    "DEFAULT_MAX_COMMIT_DIFF",
    "DEFAULT_FIRST_COMMIT_ADD",
]
