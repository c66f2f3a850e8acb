"""ErrorClassifier: resolves the user-facing message for a normalized error.

Resolution order, first match wins:

1. Exact lookup of the error code (compared in string form) in the message
   table.
2. Case-insensitive keyword match on the error message: network/fetch,
   then timeout, then parse/json.
3. The error message itself, or a generic retry prompt when empty.

The requested severity passes through untouched. Classification chooses
text and presentation, never urgency.
"""

from __future__ import annotations

from collections.abc import Mapping

from adminkit.core.constants import (
    DATA_FORMAT_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    TIMEOUT_MESSAGE,
    USER_MESSAGES,
)
from adminkit.core.logging import get_logger

from .models import Classification, NormalizedError, Severity

_logger = get_logger("errors.classifier")

# Ordered (keywords, message) pairs for the heuristic text match.
_DEFAULT_KEYWORD_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("network", "fetch"), NETWORK_FAILURE_MESSAGE),
    (("timeout",), TIMEOUT_MESSAGE),
    (("parse", "json"), DATA_FORMAT_MESSAGE),
)


class ErrorClassifier:
    """Maps normalized errors to user-facing messages.

    Args:
        messages: Extra or overriding code -> message entries, merged over
            the static table. Keys may be ints or strings.
    """

    def __init__(self, messages: Mapping[str | int, str] | None = None) -> None:
        table = dict(USER_MESSAGES)
        for code, text in (messages or {}).items():
            table[str(code)] = text
        self._messages = table
        self._keyword_rules = _DEFAULT_KEYWORD_RULES

    @property
    def messages(self) -> dict[str, str]:
        """Copy of the effective code -> message table."""
        return dict(self._messages)

    def user_message(self, error: NormalizedError) -> str:
        """Resolve the message shown to the user for ``error``."""
        if error.code is not None and error.code != "":
            by_code = self._messages.get(str(error.code))
            if by_code is not None:
                return by_code

        lowered = error.message.lower()
        for keywords, text in self._keyword_rules:
            if any(keyword in lowered for keyword in keywords):
                return text

        return error.message or GENERIC_FAILURE_MESSAGE

    def classify(
        self,
        error: NormalizedError,
        level: Severity | str = Severity.ERROR,
    ) -> Classification:
        """Classify ``error`` at the caller-declared ``level``."""
        resolved = Severity.parse(level)
        message = self.user_message(error)
        _logger.debug(
            "error_classified",
            code=error.code,
            level=resolved.label,
            user_message=message,
        )
        return Classification(level=resolved, user_message=message)


__all__ = ["ErrorClassifier"]
