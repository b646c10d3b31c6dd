"""
Configuration loading and timezone helpers.
"""
from datetime import datetime, timedelta, timezone

import pytest
import yaml

from contrib_intelligence.core.config import AppConfig, FetchConfig, default_cache_path, load_config
from contrib_intelligence.core.timezone_utils import (
    EPOCH,
    default_since,
    ensure_utc,
    format_query_date,
    is_within_window,
    parse_github_date,
    utc_now,
)


def write_yaml(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))
    assert config == AppConfig()
    assert config.fetch.delay_ms == 1500
    assert config.fetch.max_attempts == 5
    assert config.fetch.cache_ttl_secs == 7 * 24 * 3600
    assert load_config(None).lookback_months == 12


def test_yaml_overrides(tmp_path):
    path = write_yaml(tmp_path, {"lookback_months": 6, "fetch": {"delay_ms": 250, "cache_enabled": False}})
    config = load_config(path)
    assert config.lookback_months == 6
    assert config.fetch.delay_ms == 250
    assert config.fetch.cache_enabled is False
    assert config.fetch.jitter_ms == 200


def test_unknown_keys_are_rejected(tmp_path):
    with pytest.raises(ValueError, match="delay"):
        load_config(write_yaml(tmp_path, {"fetch": {"delay": 10}}))
    with pytest.raises(ValueError, match="colour"):
        load_config(write_yaml(tmp_path, {"colour": "blue"}))


def test_non_mapping_config_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_fetch_config_validation():
    with pytest.raises(ValueError):
        FetchConfig(delay_ms=-1)
    with pytest.raises(ValueError):
        FetchConfig(max_attempts=0)


def test_cache_path_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    assert default_cache_path() == str(tmp_path / "contrib-intelligence" / "cache.db")


def test_parse_github_date():
    assert parse_github_date("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert parse_github_date("2024-01-15T12:30:00+02:00") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert parse_github_date("") == EPOCH
    assert parse_github_date("not a date") == EPOCH


def test_window_is_exclusive():
    since = datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert is_within_window(since + timedelta(seconds=1), since)
    assert not is_within_window(since, since)
    assert is_within_window(datetime(2024, 3, 2), since)


def test_ensure_utc_and_query_date():
    naive = datetime(2024, 3, 1, 23, 0)
    assert ensure_utc(naive).tzinfo is timezone.utc
    shifted = datetime(2024, 3, 1, 23, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert format_query_date(shifted) == "2024-03-02"


def test_default_since_is_in_the_past():
    since = default_since(12)
    assert since < utc_now()
    assert since > utc_now() - timedelta(days=370)
