"""Configuration models for adminkit.

Defines Pydantic v2 models for logging, error reporting and telemetry.
Configuration can be built in code, loaded from YAML, or derived from the
``ADMINKIT_ENV`` deployment-mode variable.

Example YAML:
    log:
      level: DEBUG
      format: json
    reporter:
      environment: production
      telemetry:
        type: webhook
        url_env: ADMINKIT_TELEMETRY_URL
    default_page_size: 20
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from adminkit.core.constants import (
    ACKNOWLEDGE_TEXT,
    CRITICAL_DIALOG_TITLE,
    DEFAULT_PAGE_SIZE,
    TELEMETRY_TIMEOUT_SECONDS,
)

ENVIRONMENT_VARIABLE = "ADMINKIT_ENV"
"""Environment variable holding the deployment mode."""

Environment = Literal["development", "production", "test"]


class LogConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable",
    )
    file_path: Path | None = Field(
        default=None,
        description="Optional path for rotated log file output",
    )
    max_file_size_mb: int = Field(default=50, gt=0, le=1000)
    backup_count: int = Field(default=5, ge=0, le=100)
    include_timestamps: bool = True
    include_context: bool = True


class TelemetryConfig(BaseModel):
    """Where normalized errors are forwarded in production deployments."""

    type: Literal["log", "webhook", "none"] = Field(
        default="log",
        description="Telemetry sink: structured log entry, HTTP webhook, or disabled",
    )
    url: str | None = Field(default=None, description="Webhook endpoint")
    url_env: str | None = Field(
        default=None,
        description="Environment variable containing the webhook endpoint",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="HTTP headers; values may reference ${VAR} environment variables",
    )
    timeout_seconds: float = Field(default=TELEMETRY_TIMEOUT_SECONDS, gt=0)

    @model_validator(mode="after")
    def _check_webhook_target(self) -> TelemetryConfig:
        """A webhook sink needs either a url or a url_env."""
        if self.type == "webhook" and not (self.url or self.url_env):
            raise ValueError("telemetry type 'webhook' requires url or url_env")
        return self


class ReporterConfig(BaseModel):
    """Behavior of the process-wide error reporter."""

    environment: Environment = Field(
        default="development",
        description="Deployment mode; telemetry is forwarded only in production",
    )
    show_to_user: bool = Field(
        default=True,
        description="Default for surfacing reported errors through the notifier",
    )
    critical_title: str = Field(default=CRITICAL_DIALOG_TITLE, min_length=1)
    acknowledge_text: str = Field(default=ACKNOWLEDGE_TEXT, min_length=1)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


class AdminKitConfig(BaseModel):
    """Root configuration object."""

    log: LogConfig = Field(default_factory=LogConfig)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @classmethod
    def from_yaml(cls, path: Path) -> AdminKitConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> AdminKitConfig:
        """Load configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    @classmethod
    def from_env(cls) -> AdminKitConfig:
        """Build the default configuration for the current deployment mode."""
        environment = os.environ.get(ENVIRONMENT_VARIABLE, "development").strip().lower()
        return cls.model_validate({"reporter": {"environment": environment or "development"}})


# =============================================================================
# Active configuration
# =============================================================================

_active_config: AdminKitConfig | None = None


def get_config() -> AdminKitConfig:
    """Return the configuration applied at startup, or the defaults."""
    global _active_config
    if _active_config is None:
        _active_config = AdminKitConfig()
    return _active_config


def set_config(config: AdminKitConfig) -> AdminKitConfig:
    global _active_config
    _active_config = config
    return config


def reset_config() -> None:
    """Forget the active configuration (primarily for testing)."""
    global _active_config
    _active_config = None


__all__ = [
    "AdminKitConfig",
    "ENVIRONMENT_VARIABLE",
    "Environment",
    "LogConfig",
    "ReporterConfig",
    "TelemetryConfig",
    "get_config",
    "reset_config",
    "set_config",
]
