"""Risk rules - explicit scoring configuration for the Risk Evaluator.

Every constant the evaluator and alert generator use lives here so the
evaluator can be built from a YAML file or directly in tests. Nothing in
the scoring path reads the environment.
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from session_sentinel.common.exceptions import ConfigurationError
from session_sentinel.common.logging import get_logger

logger = get_logger(__name__)


class _Frozen(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}


class DeviceRiskRules(_Frozen):
    new_device_window_hours: float = Field(default=24.0, gt=0)
    new_device_penalty: float = Field(default=40.0, ge=0)
    very_low_trust_below: float = Field(default=30.0, ge=0, le=100)
    very_low_trust_penalty: float = Field(default=50.0, ge=0)
    low_trust_below: float = Field(default=50.0, ge=0, le=100)
    low_trust_penalty: float = Field(default=30.0, ge=0)
    moderate_trust_below: float = Field(default=70.0, ge=0, le=100)
    moderate_trust_penalty: float = Field(default=15.0, ge=0)
    untrusted_penalty: float = Field(default=20.0, ge=0)


class LocationRiskRules(_Frozen):
    unknown_location_risk: float = Field(default=20.0, ge=0, le=100)
    max_compared_sessions: int = Field(default=5, ge=1)
    impossible_travel_speed_kmh: float = Field(default=800.0, gt=0)
    impossible_travel_penalty: float = Field(default=80.0, ge=0)
    suspicious_travel_speed_kmh: float = Field(default=500.0, gt=0)
    suspicious_travel_penalty: float = Field(default=40.0, ge=0)
    country_window_days: float = Field(default=7.0, gt=0)
    max_recent_countries: int = Field(default=3, ge=1)
    many_countries_penalty: float = Field(default=30.0, ge=0)


class BehavioralRiskRules(_Frozen):
    device_window_hours: float = Field(default=24.0, gt=0)
    heavy_switching_devices: int = Field(default=5, ge=1)
    heavy_switching_penalty: float = Field(default=60.0, ge=0)
    switching_devices: int = Field(default=3, ge=1)
    switching_penalty: float = Field(default=30.0, ge=0)
    off_hours_deviation: float = Field(default=8.0, ge=0)
    off_hours_penalty: float = Field(default=20.0, ge=0)


class SessionRiskRules(_Frozen):
    at_cap_penalty: float = Field(default=50.0, ge=0)
    over_cap_margin: int = Field(default=2, ge=0)
    over_cap_penalty: float = Field(default=30.0, ge=0)
    many_countries_penalty: float = Field(default=40.0, ge=0)
    two_countries_penalty: float = Field(default=20.0, ge=0)


class CompositeWeights(_Frozen):
    device: float = Field(default=0.30, ge=0)
    location: float = Field(default=0.25, ge=0)
    behavioral: float = Field(default=0.25, ge=0)
    session: float = Field(default=0.20, ge=0)

    @model_validator(mode="after")
    def _convex(self) -> "CompositeWeights":
        total = self.device + self.location + self.behavioral + self.session
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"composite weights must sum to 1.0, got {total}")
        return self


class AlertThresholds(_Frozen):
    critical_risk: float = Field(default=80.0, ge=0, le=100)
    high_risk: float = Field(default=60.0, ge=0, le=100)
    suspicious_device: float = Field(default=70.0, ge=0, le=100)
    impossible_travel: float = Field(default=80.0, ge=0, le=100)
    concurrent_sessions: float = Field(default=60.0, ge=0, le=100)

    @model_validator(mode="after")
    def _ordered(self) -> "AlertThresholds":
        if self.high_risk > self.critical_risk:
            raise ValueError("high_risk threshold must not exceed critical_risk")
        return self


class RiskConfig(_Frozen):
    """Complete risk scoring configuration.

    Mirrors config/risk_rules.yaml. Every section is optional in the file;
    missing sections take the defaults below.
    """

    version: str = "1.0.0"
    device: DeviceRiskRules = Field(default_factory=DeviceRiskRules)
    location: LocationRiskRules = Field(default_factory=LocationRiskRules)
    behavioral: BehavioralRiskRules = Field(default_factory=BehavioralRiskRules)
    session: SessionRiskRules = Field(default_factory=SessionRiskRules)
    weights: CompositeWeights = Field(default_factory=CompositeWeights)
    alerts: AlertThresholds = Field(default_factory=AlertThresholds)


def load_risk_config(path: Optional[Union[str, Path]] = None) -> RiskConfig:
    """Load and validate risk rules from YAML.

    Args:
        path: YAML file. Returns the built-in defaults when None.

    Returns:
        Validated RiskConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        return RiskConfig()

    rules_file = Path(path)
    if not rules_file.exists():
        raise ConfigurationError(
            f"Risk rules file not found: {rules_file}",
            details={"path": str(rules_file)},
        )

    try:
        with open(rules_file, "r") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Risk rules file is not valid YAML: {e}",
            details={"path": str(rules_file)},
        ) from e

    try:
        config = RiskConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigurationError(
            "Risk rules failed validation",
            details={"path": str(rules_file), "errors": e.errors(include_url=False)},
        ) from e

    logger.info(f"Loaded risk rules v{config.version} from {rules_file}")
    return config
