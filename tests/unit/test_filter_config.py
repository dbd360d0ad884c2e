"""
Tests for filter configuration and the preference store.

Covers disabled defaults, buffer parsing, loading from saved preferences,
and reading/writing the preferences file.
"""

import json

import pytest

from src.config import (
    DEFAULT_PREFERENCES,
    get_preferences_path,
    load_preferences,
    save_preferences,
    update_preferences,
)
from src.filters.filter_config import FilterConfig, load_filter_config, parse_buffer


class TestFilterConfigDefaults:
    def test_everything_off(self):
        config = FilterConfig()
        assert config.buffer_percent is None
        assert config.group_attributes is False
        assert config.group_resistances is False
        assert config.clear_first is False

    def test_empty_prefs(self):
        assert load_filter_config({}) == FilterConfig()

    def test_none_prefs(self):
        assert load_filter_config(None) == FilterConfig()


class TestParseBuffer:
    @pytest.mark.parametrize("value,expected", [
        ("10", 10.0),
        (" 12.5 ", 12.5),
        (15, 15.0),
        ("0", 0.0),
        ("150", 100.0),
        ("-5", 0.0),
    ])
    def test_valid(self, value, expected):
        assert parse_buffer(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "nan", True, [10]])
    def test_disabled(self, value):
        assert parse_buffer(value) is None

    def test_invalid_logged(self, caplog):
        with caplog.at_level("WARNING"):
            parse_buffer("ten")
        assert "Ignoring invalid buffer value" in caplog.text


class TestLoadFilterConfig:
    def test_all_keys(self):
        config = load_filter_config({
            "min_buffer": "10",
            "generic_attributes": True,
            "generic_elemental_resists": True,
            "clear_before_apply": True,
        })
        assert config == FilterConfig(
            buffer_percent=10.0,
            group_attributes=True,
            group_resistances=True,
            clear_first=True,
        )

    def test_partial(self):
        config = load_filter_config({"generic_attributes": True})
        assert config.group_attributes is True
        assert config.buffer_percent is None
        assert config.group_resistances is False


class TestPreferenceStore:
    def test_missing_file_gives_defaults(self, config_home):
        assert load_preferences() == DEFAULT_PREFERENCES

    def test_path_under_config_home(self, config_home):
        assert get_preferences_path() == config_home / "item-stat-filters" / "preferences.json"

    def test_save_and_load(self, config_home):
        prefs = dict(DEFAULT_PREFERENCES, min_buffer="10", generic_attributes=True)
        save_preferences(prefs)
        assert load_preferences() == prefs

    def test_unknown_keys_dropped(self, config_home):
        get_preferences_path().write_text(json.dumps({"min_buffer": "5", "theme": "dark"}))
        prefs = load_preferences()
        assert prefs["min_buffer"] == "5"
        assert "theme" not in prefs

    def test_corrupt_file_gives_defaults(self, config_home):
        get_preferences_path().write_text("{not json")
        assert load_preferences() == DEFAULT_PREFERENCES

    def test_non_mapping_file_gives_defaults(self, config_home):
        get_preferences_path().write_text("[1, 2]")
        assert load_preferences() == DEFAULT_PREFERENCES

    def test_update(self, config_home):
        update_preferences(clear_before_apply=True)
        prefs = update_preferences(min_buffer="15")
        assert prefs["clear_before_apply"] is True
        assert prefs["min_buffer"] == "15"
        assert load_preferences() == prefs

    def test_update_unknown_key(self, config_home):
        with pytest.raises(KeyError):
            update_preferences(theme="dark")

    def test_round_trip_to_filter_config(self, config_home):
        update_preferences(min_buffer="20", generic_elemental_resists=True)
        config = load_filter_config(load_preferences())
        assert config.buffer_percent == 20.0
        assert config.group_resistances is True
        assert config.group_attributes is False
