"""Structured logging for adminkit.

Every component logs through ``get_logger(component)``, which returns an
``AdminLogger`` bound to the component name. Entries are rendered by
structlog as console lines or JSON, with secrets redacted and the fields
of the active ``OperationContext`` (operation, route, request id) merged in.

Example usage:
    from adminkit.core.logging import OperationContext, configure_logging, get_logger, with_context

    configure_logging(level="DEBUG", format="json")
    logger = get_logger("operations")

    with with_context(OperationContext(operation="users.list", route="/users")):
        logger.info("page_loaded", page=2)
"""

from __future__ import annotations

import logging
import re
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from adminkit.core.config import LogConfig

SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
    "bearer",
    "cookie",
})
"""Substrings that mark a key as sensitive, matched case-insensitively."""

_SENSITIVE_KEY = re.compile("|".join(sorted(SENSITIVE_PATTERNS)), re.IGNORECASE)
REDACTED = "[REDACTED]"


@dataclass(frozen=True)
class OperationContext:
    """Correlation fields for the log entries of one UI binding.

    Attributes:
        operation: Name of the operation (e.g. "users.list").
        route: Current view location; the reporter uses it as the error location.
        request_id: Correlation identifier, unique per context by default.
    """

    operation: str = "unknown"
    route: str | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def with_operation(self, operation: str) -> OperationContext:
        return replace(self, operation=operation)

    def to_dict(self) -> dict[str, Any]:
        """Fields to merge into log entries; an unset route is left out."""
        fields = {"operation": self.operation, "request_id": self.request_id}
        if self.route is not None:
            fields["route"] = self.route
        return fields


_active_context: ContextVar[OperationContext | None] = ContextVar(
    "adminkit_operation_context", default=None
)


def get_current_context() -> OperationContext | None:
    return _active_context.get()


@contextmanager
def with_context(ctx: OperationContext) -> Iterator[OperationContext]:
    """Make ``ctx`` the active context until the block exits.

    The context is task-local: sibling asyncio tasks each see their own.
    """
    token = _active_context.set(ctx)
    try:
        yield ctx
    finally:
        _active_context.reset(token)


# =============================================================================
# Processors
# =============================================================================


def _sanitize_value(key: str, value: Any) -> Any:
    """Redact ``value`` when ``key`` looks sensitive; recurse into mappings."""
    if _SENSITIVE_KEY.search(key):
        return REDACTED
    if isinstance(value, Mapping):
        return {k: _sanitize_value(str(k), v) for k, v in value.items()}
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    return {key: _sanitize_value(key, value) for key, value in event_dict.items()}


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Merge the active OperationContext without overriding explicit fields."""
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            event_dict.setdefault(key, value)
    return event_dict


def _build_chain(
    renderer: Processor,
    *,
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    chain: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
    ]
    if include_context:
        chain.append(_add_context)
    chain.append(_sanitize_event_dict)
    if include_timestamps:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    chain += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]
    return chain


# =============================================================================
# Logger
# =============================================================================


class AdminLogger:
    """Component logger.

    The structlog logger is resolved on each call, so loggers created at
    import time follow a later ``configure_logging()``.
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    @classmethod
    def _derive(cls, component: str, context: dict[str, Any]) -> AdminLogger:
        derived = cls.__new__(cls)
        derived._component = component
        derived._context = context
        return derived

    def bind(self, **context: Any) -> AdminLogger:
        return self._derive(self._component, {**self._context, **context})

    def unbind(self, *keys: str) -> AdminLogger:
        return self._derive(
            self._component,
            {k: v for k, v in self._context.items() if k not in keys},
        )

    def _log(self, method: str, event: str, fields: dict[str, Any]) -> None:
        bound = structlog.get_logger().bind(**self._context)
        getattr(bound, method)(event, **fields)

    def debug(self, event: str, **kw: Any) -> None:
        self._log("debug", event, kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log("info", event, kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log("warning", event, kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log("error", event, kw)

    def critical(self, event: str, **kw: Any) -> None:
        self._log("critical", event, kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._log("exception", event, kw)


def get_logger(component: str, **initial_context: Any) -> AdminLogger:
    return AdminLogger(component, **initial_context)


# =============================================================================
# Configuration
# =============================================================================


def _make_handler(
    format: str,  # noqa: A002
    file_path: Path | None,
    max_file_size_mb: int,
    backup_count: int,
) -> logging.Handler:
    if file_path is None:
        # JSON goes to stdout for collectors; console output stays on stderr.
        return logging.StreamHandler(sys.stdout if format == "json" else sys.stderr)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        file_path,
        maxBytes=max_file_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8",
    )


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Route structlog through a single root handler.

    Replaces any handlers already on the root logger. Safe to call again
    to reconfigure.

    Args:
        level: Minimum level written.
        format: "json" for one JSON object per line, "console" for humans.
        file_path: Write to this size-rotated file instead of a stream.
        max_file_size_mb: Rotation threshold.
        backup_count: Rotated files kept.
        include_timestamps: Add an ISO8601 UTC ``timestamp`` field.
        include_context: Merge the active OperationContext fields.
    """
    log_level = logging.getLevelName(level)
    handler = _make_handler(format, file_path, max_file_size_mb, backup_count)
    handler.setLevel(log_level)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer(colors=file_path is None)
    )
    structlog.configure(
        processors=_build_chain(
            renderer,
            include_timestamps=include_timestamps,
            include_context=include_context,
        ),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging_from(config: LogConfig) -> None:
    """Apply a ``LogConfig`` loaded from YAML or built in code."""
    configure_logging(
        level=config.level,
        format=config.format,
        file_path=config.file_path,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
        include_timestamps=config.include_timestamps,
        include_context=config.include_context,
    )


__all__ = [
    "AdminLogger",
    "OperationContext",
    "REDACTED",
    "SENSITIVE_PATTERNS",
    "configure_logging",
    "configure_logging_from",
    "get_current_context",
    "get_logger",
    "with_context",
]
