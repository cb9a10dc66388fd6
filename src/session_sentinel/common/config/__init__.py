"""Configuration module - environment settings and risk rules."""

from session_sentinel.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    get_config,
    reset_config,
)
from session_sentinel.common.config.risk import (
    RiskConfig,
    DeviceRiskRules,
    LocationRiskRules,
    BehavioralRiskRules,
    SessionRiskRules,
    CompositeWeights,
    AlertThresholds,
    load_risk_config,
)

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "get_config",
    "reset_config",
    "RiskConfig",
    "DeviceRiskRules",
    "LocationRiskRules",
    "BehavioralRiskRules",
    "SessionRiskRules",
    "CompositeWeights",
    "AlertThresholds",
    "load_risk_config",
]
