"""Exception hierarchy for adminkit.

All package-specific exceptions inherit from AdminKitError, enabling callers
to catch broad (AdminKitError) or narrow (e.g., ApiError).
"""

from __future__ import annotations

from typing import Any


class AdminKitError(Exception):
    """Base exception for all adminkit errors."""


class ApiError(AdminKitError):
    """Raised by data providers when a call fails.

    Carries the provider's error code, transport status and payload so the
    normalizer can extract them. ``status`` stands in for ``code`` when the
    provider only reports a transport status.
    """

    def __init__(
        self,
        message: str = "",
        *,
        code: str | int | None = None,
        status: int | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.data = data

    def __repr__(self) -> str:
        return (
            f"ApiError(message={self.message!r}, code={self.code!r}, "
            f"status={self.status!r})"
        )


class CapabilityUnavailableError(AdminKitError):
    """Raised when a UI capability cannot be resolved in the current context.

    The reporter catches it and degrades to log-only presentation.
    """


class ConcurrentExecutionError(AdminKitError):
    """Raised when an operation is executed with new arguments while in flight."""
