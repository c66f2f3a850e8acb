"""Core infrastructure: configuration, logging, constants and errors."""

from adminkit.core.config import (
    AdminKitConfig,
    LogConfig,
    ReporterConfig,
    TelemetryConfig,
)
from adminkit.core.logging import (
    OperationContext,
    configure_logging,
    configure_logging_from,
    get_logger,
    with_context,
)

__all__ = [
    "AdminKitConfig",
    "LogConfig",
    "OperationContext",
    "ReporterConfig",
    "TelemetryConfig",
    "configure_logging",
    "configure_logging_from",
    "get_logger",
    "with_context",
]
