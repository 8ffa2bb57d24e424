import dataclasses
import json
from datetime import datetime

import pandas as pd
import pytest

from githours.config import Config, MergeDetection, load_aliases, parse_aliases, parse_date_input
from githours.errors import ConfigurationError

__author__ = "willmcginnis"

# a Wednesday
NOW = pd.Timestamp("2024-03-06 15:42:10", tz="UTC")


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.max_commit_diff_in_minutes == 120
        assert config.first_commit_addition_in_minutes == 120
        assert config.since is None
        assert config.until is None
        assert config.merge_request is True
        assert config.merge_detection is MergeDetection.MESSAGE_PREFIX
        assert config.git_path == "."
        assert config.branch is None
        assert dict(config.email_aliases) == {}

    def test_is_immutable(self):
        config = Config(email_aliases={"a@x.com": "b@x.com"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_commit_diff_in_minutes = 5
        with pytest.raises(TypeError):
            config.email_aliases["c@x.com"] = "d@x.com"

    def test_aliases_are_copied(self):
        aliases = {"a@x.com": "b@x.com"}
        config = Config(email_aliases=aliases)
        aliases["c@x.com"] = "d@x.com"
        assert "c@x.com" not in config.email_aliases

    def test_is_hashable(self):
        config = Config(email_aliases={"a@x.com": "b@x.com"}, since=pd.Timestamp("2024-03-04", tz="UTC"))
        same = Config(email_aliases={"a@x.com": "b@x.com"}, since=pd.Timestamp("2024-03-04", tz="UTC"))
        assert config == same
        assert hash(config) == hash(same)
        assert hash(Config()) == hash(Config())
        assert len({config, same, Config()}) == 2

    def test_replace(self):
        config = Config(email_aliases={"a@x.com": "b@x.com"})
        changed = config.replace(branch="develop")
        assert changed.branch == "develop"
        assert changed.email_aliases == config.email_aliases
        assert config.branch is None

    @pytest.mark.parametrize("value", [-1, 1.5, "120", True])
    def test_bad_thresholds(self, value):
        with pytest.raises(ConfigurationError):
            Config(max_commit_diff_in_minutes=value)
        with pytest.raises(ConfigurationError):
            Config(first_commit_addition_in_minutes=value)

    def test_zero_thresholds_allowed(self):
        config = Config(max_commit_diff_in_minutes=0, first_commit_addition_in_minutes=0)
        assert config.max_commit_diff_in_minutes == 0

    def test_naive_bounds_rejected(self):
        with pytest.raises(ConfigurationError):
            Config(since=datetime(2024, 1, 1))

    def test_aware_datetime_bound_becomes_timestamp(self):
        config = Config(until=datetime.fromisoformat("2024-01-01T00:00:00+00:00"))
        assert isinstance(config.until, pd.Timestamp)

    def test_merge_detection_from_string(self):
        assert Config(merge_detection="parents").merge_detection is MergeDetection.PARENT_COUNT
        with pytest.raises(ConfigurationError):
            Config(merge_detection="sideways")

    def test_inverted_window_is_allowed(self):
        config = Config(since=parse_date_input("2024-02-01"), until=parse_date_input("2024-01-01"))
        assert config.since > config.until


class TestParseDateInput:
    @pytest.mark.parametrize("token", ["always", "", None, "  always  "])
    def test_unbounded(self, token):
        assert parse_date_input(token, now=NOW) is None

    def test_today(self):
        assert parse_date_input("today", now=NOW) == pd.Timestamp("2024-03-06", tz="UTC")

    def test_yesterday(self):
        assert parse_date_input("yesterday", now=NOW) == pd.Timestamp("2024-03-05", tz="UTC")

    def test_thisweek_starts_on_sunday(self):
        assert parse_date_input("thisweek", now=NOW) == pd.Timestamp("2024-03-03", tz="UTC")

    def test_lastweek(self):
        assert parse_date_input("lastweek", now=NOW) == pd.Timestamp("2024-02-25", tz="UTC")

    def test_thisweek_on_a_sunday_is_today(self):
        sunday = pd.Timestamp("2024-03-10 08:00", tz="UTC")
        assert parse_date_input("thisweek", now=sunday) == pd.Timestamp("2024-03-10", tz="UTC")

    def test_naive_now_is_utc(self):
        assert parse_date_input("today", now=datetime(2024, 3, 6, 23, 59)) == pd.Timestamp("2024-03-06", tz="UTC")

    def test_now_in_other_timezone(self):
        """01:00 on the 7th at +02:00 is still the 6th in UTC."""
        now = pd.Timestamp("2024-03-07 01:00", tz="Etc/GMT-2")
        assert parse_date_input("today", now=now) == pd.Timestamp("2024-03-06", tz="UTC")

    def test_relative_default_now(self):
        today = parse_date_input("today")
        assert today.tzinfo is not None
        assert today == today.normalize()

    def test_explicit_date(self):
        assert parse_date_input("2023-12-31") == pd.Timestamp("2023-12-31", tz="UTC")

    @pytest.mark.parametrize("token", ["tomorrow", "2024-13-01", "31/12/2023", "2024-02-30", "last week"])
    def test_invalid(self, token):
        with pytest.raises(ConfigurationError):
            parse_date_input(token, now=NOW)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_date_input("nope")


class TestAliases:
    def test_parse_pairs(self):
        assert parse_aliases(["a.alt@x.com=a@x.com", " b@y.com = a@x.com "]) == {
            "a.alt@x.com": "a@x.com",
            "b@y.com": "a@x.com",
        }

    @pytest.mark.parametrize("pair", ["a@x.com", "=a@x.com", "a@x.com=", ""])
    def test_parse_invalid_pairs(self, pair):
        with pytest.raises(ConfigurationError):
            parse_aliases([pair])

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"a.alt@x.com": "a@x.com"}))
        assert load_aliases(path) == {"a.alt@x.com": "a@x.com"}

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_aliases(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_aliases(path)

    def test_load_wrong_shape(self, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps(["a@x.com"]))
        with pytest.raises(ConfigurationError):
            load_aliases(path)
