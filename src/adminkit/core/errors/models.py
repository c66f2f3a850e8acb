"""Data models for error normalization and classification.

This module provides:
- Severity: caller-declared urgency of a reported error
- NormalizedError: the canonical in-memory error record
- Classification: severity plus the resolved user-facing message
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Severity(IntEnum):
    """Severity levels, in order of increasing urgency.

    The level is declared by the caller, never inferred from the error. It
    selects the logging channel and the presentation style:

    - INFO, WARNING: warning log channel, transient notification
    - ERROR: error log channel, transient notification
    - CRITICAL: error log channel, blocking dialog needing acknowledgement
    """

    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def is_error_channel(self) -> bool:
        """True when the level logs at error severity."""
        return self >= Severity.ERROR

    @classmethod
    def parse(cls, value: Severity | str) -> Severity:
        """Accept a Severity or its case-insensitive name.

        Raises:
            ValueError: If the name is not a known level.
        """
        if isinstance(value, Severity):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"unknown severity level: {value!r}") from None


@dataclass(frozen=True)
class NormalizedError:
    """Uniform error record produced by the normalizer.

    ``message`` is never empty and ``timestamp`` (epoch milliseconds) is
    always stamped at normalization time.
    """

    message: str
    timestamp: int
    code: str | int | None = None
    details: Any = None
    stack: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, omitting absent fields."""
        result: dict[str, Any] = {
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.code is not None:
            result["code"] = self.code
        if self.details is not None:
            result["details"] = self.details
        if self.stack is not None:
            result["stack"] = self.stack
        return result


@dataclass(frozen=True)
class Classification:
    """Result of classifying a normalized error."""

    level: Severity
    user_message: str
