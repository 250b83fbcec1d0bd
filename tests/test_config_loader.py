"""Tests for form configuration loading."""

import pytest

from erp_validation.config_loader import (
    CONFIG_DIR,
    EngineSettings,
    load_form_config,
    parse_form_config,
    resolve_config_path,
)
from erp_validation.const import DEFAULT_CACHE_TTL, DEFAULT_DEBOUNCE_DELAY
from erp_validation.domain.exceptions import RuleConfigError


def _minimal(**overrides):
    config = {"version": "1.0", "entity": "holiday"}
    config.update(overrides)
    return config


class TestLoadFormConfig:
    """Test loading YAML configuration files."""

    def test_load_shipped_holiday(self):
        """Test the shipped holiday rules load."""
        config = load_form_config("holiday")

        assert config["entity"] == "holiday"
        assert [rule["type"] for rule in config["fields"]["title"]] == ["required", "length"]
        assert config["limits"]["max_consecutive_days"] == 30

    def test_defaults_applied_to_record_rules(self):
        """Test ``defaults`` fill keys the rules leave out."""
        config = load_form_config("holiday")

        levels = {rule["type"]: rule["level"] for rule in config["business"]}
        assert levels["holiday_conflict"] == "error"
        assert levels["holiday_near_duplicate"] == "warning"
        assert all(rule["level"] == "error" for rule in config["cross_field"])

    def test_load_shipped_daily_work(self):
        """Test the shipped daily work rules load."""
        config = load_form_config("daily_work")

        assert config["entity"] == "daily_work"
        assert "number" in config["fields"]

    def test_resolve_config_path(self, tmp_path):
        """Test form names resolve to the shipped files."""
        assert resolve_config_path("holiday") == CONFIG_DIR / "holiday.yaml"
        custom = tmp_path / "custom.yaml"
        assert resolve_config_path(custom) == custom

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_form_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML raises RuleConfigError."""
        path = tmp_path / "broken.yaml"
        path.write_text("version: [1.0\nentity: holiday\n", encoding="utf-8")

        with pytest.raises(RuleConfigError, match="Invalid YAML"):
            load_form_config(path)

    def test_empty_file(self, tmp_path):
        """Test an empty file raises RuleConfigError."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(RuleConfigError, match="empty"):
            load_form_config(path)

    def test_load_custom_file(self, tmp_path):
        """Test a custom file with a numeric version loads."""
        path = tmp_path / "custom.yaml"
        path.write_text(
            "version: 1.2\n"
            "entity: holiday\n"
            "fields:\n"
            "  title:\n"
            "    - type: required\n"
            "      error: Title is required\n",
            encoding="utf-8",
        )

        config = load_form_config(path)

        assert config["version"] == "1.2"
        assert config["cross_field"] == []
        assert config["business"] == []


class TestParseFormConfig:
    """Test structural validation."""

    def test_minimal_config(self):
        """Test optional sections get empty defaults."""
        config = parse_form_config(_minimal())

        assert config["fields"] == {}
        assert config["settings"] == {}
        assert config["labels"] == {}

    def test_missing_version(self):
        """Test the version is required."""
        with pytest.raises(RuleConfigError, match="version"):
            parse_form_config({"entity": "holiday"})

    def test_unsupported_version(self):
        """Test only version 1.x is accepted."""
        with pytest.raises(RuleConfigError, match="not supported"):
            parse_form_config(_minimal(version="2.0"))

    def test_not_a_mapping(self):
        """Test a YAML list is rejected."""
        with pytest.raises(RuleConfigError, match="mapping"):
            parse_form_config(["version", "1.0"])

    def test_rule_without_type(self):
        """Test every rule needs a type."""
        with pytest.raises(RuleConfigError, match="Invalid rule configuration"):
            parse_form_config(_minimal(fields={"title": [{"error": "Title is required"}]}))

    def test_unknown_field_rule_type(self):
        """Test a misspelled field rule type fails at load time."""
        with pytest.raises(RuleConfigError, match="Invalid rule configuration"):
            parse_form_config(_minimal(fields={"title": [{"type": "requird"}]}))

    def test_unknown_severity(self):
        """Test severities are restricted to the known levels."""
        with pytest.raises(RuleConfigError):
            parse_form_config(
                _minimal(fields={"title": [{"type": "required", "severity": "fatal"}]})
            )

    def test_unknown_level(self):
        """Test rule levels are error or warning."""
        with pytest.raises(RuleConfigError):
            parse_form_config(_minimal(business=[{"type": "no_past_dates", "level": "info"}]))

    def test_negative_debounce(self):
        """Test settings are range checked."""
        with pytest.raises(RuleConfigError):
            parse_form_config(_minimal(settings={"debounce_delay": -1}))

    def test_rule_defaults_do_not_override(self):
        """Test explicit rule keys win over ``defaults``."""
        config = parse_form_config(
            _minimal(
                defaults={"level": "warning"},
                business=[{"type": "no_past_dates"}, {"type": "advance_notice", "level": "error"}],
            )
        )

        assert [rule["level"] for rule in config["business"]] == ["warning", "error"]


class TestEngineSettings:
    """Test EngineSettings construction."""

    def test_defaults(self):
        """Test settings without configuration."""
        settings = EngineSettings.from_config(None)

        assert settings.debounce_delay == DEFAULT_DEBOUNCE_DELAY
        assert settings.cache_ttl == DEFAULT_CACHE_TTL
        assert settings.track_performance is True

    def test_from_file_settings(self):
        """Test the settings block of a configuration."""
        settings = EngineSettings.from_config(
            parse_form_config(_minimal(settings={"debounce_delay": 0.5, "history_size": 10}))
        )

        assert settings.debounce_delay == 0.5
        assert settings.history_size == 10

    def test_overrides_win(self):
        """Test keyword overrides replace file values; unknown keys are ignored."""
        settings = EngineSettings.from_config(
            {"settings": {"debounce_delay": 0.5, "cache_ttl": 10}},
            debounce_delay=0.01,
            color="red",
        )

        assert settings.debounce_delay == 0.01
        assert settings.cache_ttl == 10
