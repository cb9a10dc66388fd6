"""Tests for risk rule loading and validation."""

import pytest

from session_sentinel.common.config import (
    AlertThresholds,
    CompositeWeights,
    Config,
    RiskConfig,
    load_risk_config,
)
from session_sentinel.common.exceptions import ConfigurationError


class TestRiskConfigDefaults:

    def test_defaults(self):
        config = RiskConfig()

        assert config.device.new_device_penalty == 40.0
        assert config.location.impossible_travel_speed_kmh == 800.0
        assert config.behavioral.off_hours_deviation == 8.0
        assert config.session.at_cap_penalty == 50.0
        assert config.weights.device == 0.30
        assert config.alerts.critical_risk == 80.0

    def test_frozen(self):
        config = RiskConfig()

        with pytest.raises(Exception):
            config.version = "2.0.0"

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            CompositeWeights(device=0.5, location=0.5, behavioral=0.5, session=0.5)

    def test_high_threshold_above_critical_rejected(self):
        with pytest.raises(ValueError):
            AlertThresholds(critical_risk=50.0, high_risk=70.0)


class TestLoadRiskConfig:

    def test_none_returns_defaults(self):
        assert load_risk_config(None) == RiskConfig()

    def test_shipped_rules_match_defaults(self):
        shipped = load_risk_config(Config().config_dir / "risk_rules.yaml")

        assert shipped == RiskConfig()

    def test_partial_file(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text(
            "version: '2.1.0'\n"
            "location:\n"
            "  impossible_travel_speed_kmh: 900\n"
        )

        config = load_risk_config(rules)

        assert config.version == "2.1.0"
        assert config.location.impossible_travel_speed_kmh == 900.0
        assert config.location.suspicious_travel_speed_kmh == 500.0
        assert config.device == RiskConfig().device

    def test_empty_file(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("")

        assert load_risk_config(rules) == RiskConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_risk_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("device: [unclosed\n")

        with pytest.raises(ConfigurationError, match="not valid YAML"):
            load_risk_config(rules)

    def test_out_of_range_value(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("alerts:\n  critical_risk: 150\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_risk_config(rules)

        assert exc_info.value.details["errors"]

    def test_unknown_key(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("device:\n  mystery_penalty: 10\n")

        with pytest.raises(ConfigurationError):
            load_risk_config(rules)

    def test_weights_not_convex(self, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("weights:\n  device: 0.9\n")

        with pytest.raises(ConfigurationError):
            load_risk_config(rules)
