"""Configuration management - Centralized configuration for SessionSentinel.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from session_sentinel.common.constants import MonitoringConstants, SessionConstants
from session_sentinel.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


DEFAULT_TOKEN_SECRET = "CHANGE-ME-in-production-use-a-real-secret"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # settings.py -> config -> common -> session_sentinel -> src -> project_root
    current = Path(__file__).resolve()
    return current.parent.parent.parent.parent.parent


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Central configuration object for SessionSentinel.

    All settings can be overridden via environment variables prefixed with SENTINEL_.

    Example:
        SENTINEL_ENVIRONMENT=production
        SENTINEL_LOG_LEVEL=INFO
        SENTINEL_TOKEN_SECRET=...
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("SENTINEL_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(default_factory=lambda: _env_flag("SENTINEL_DEBUG"))
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("SENTINEL_LOG_LEVEL", "INFO"))
    )

    # Paths
    project_root: Path = field(default_factory=_get_project_root)

    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("SENTINEL_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("SENTINEL_API_PORT", "8000"))
    )

    # Access tokens
    token_secret: str = field(
        default_factory=lambda: os.getenv("SENTINEL_TOKEN_SECRET", DEFAULT_TOKEN_SECRET)
    )
    token_algorithm: str = field(
        default_factory=lambda: os.getenv("SENTINEL_TOKEN_ALGORITHM", "HS256")
    )
    token_expire_minutes: int = field(
        default_factory=lambda: int(os.getenv("SENTINEL_TOKEN_EXPIRE_MINUTES", "60"))
    )

    # Session ledger
    inactivity_timeout_hours: float = field(
        default_factory=lambda: float(
            os.getenv(
                "SENTINEL_INACTIVITY_TIMEOUT_HOURS",
                str(SessionConstants.INACTIVITY_TIMEOUT_HOURS),
            )
        )
    )
    sweep_enabled: bool = field(
        default_factory=lambda: _env_flag("SENTINEL_SWEEP_ENABLED", "true")
    )
    sweep_interval_seconds: float = field(
        default_factory=lambda: float(
            os.getenv(
                "SENTINEL_SWEEP_INTERVAL_SECONDS",
                str(SessionConstants.SWEEP_INTERVAL_SECONDS),
            )
        )
    )

    # Monitoring (CloudWatch)
    metrics_enabled: bool = field(
        default_factory=lambda: _env_flag("SENTINEL_METRICS_ENABLED")
    )
    metrics_namespace: str = field(
        default_factory=lambda: os.getenv(
            "SENTINEL_METRICS_NAMESPACE", MonitoringConstants.DEFAULT_NAMESPACE
        )
    )
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", "us-east-1")
    )

    # Risk rules
    risk_rules_file: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["SENTINEL_RISK_RULES_FILE"])
            if os.getenv("SENTINEL_RISK_RULES_FILE")
            else None
        )
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.inactivity_timeout_hours <= 0:
            raise ConfigurationError(
                "SENTINEL_INACTIVITY_TIMEOUT_HOURS must be positive",
                details={"value": self.inactivity_timeout_hours},
            )
        if self.sweep_interval_seconds <= 0:
            raise ConfigurationError(
                "SENTINEL_SWEEP_INTERVAL_SECONDS must be positive",
                details={"value": self.sweep_interval_seconds},
            )

        if self.environment == Environment.PRODUCTION:
            if self.token_secret == DEFAULT_TOKEN_SECRET:
                raise ConfigurationError(
                    "SENTINEL_TOKEN_SECRET must be set in production"
                )
            if self.debug:
                import warnings
                warnings.warn(
                    "Debug mode is enabled in production environment",
                    RuntimeWarning,
                    stacklevel=2
                )

    @property
    def config_dir(self) -> Path:
        """Get the config directory path."""
        return self.project_root / "config"

    @property
    def resolved_risk_rules_file(self) -> Path:
        """Risk rules file, defaulting to config/risk_rules.yaml."""
        return self.risk_rules_file or self.config_dir / "risk_rules.yaml"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
