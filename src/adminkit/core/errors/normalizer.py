"""Conversion of arbitrary raised values into NormalizedError records.

``normalize`` is total: whatever a provider raises (an exception, a bare
string, a payload dict, an object with error attributes, or nothing useful
at all) comes back as a NormalizedError with a non-empty message and a
fresh timestamp. It never raises.
"""

from __future__ import annotations

import asyncio
import json
import traceback
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from adminkit.core.constants import (
    NETWORK_ERROR,
    PARSE_ERROR,
    TIMEOUT,
    UNKNOWN_ERROR_MESSAGE,
)
from adminkit.utils.time import now_ms

from .models import NormalizedError

_CODE_FIELDS = ("code", "status", "status_code")
_MESSAGE_FIELDS = ("message", "msg")
_STRUCTURED_FIELDS = frozenset({
    "code", "status", "status_code", "message", "msg", "data", "response", "details",
})

# Checked in order; timeouts first because some timeout types are also OSErrors.
_SENTINEL_CODES: tuple[tuple[tuple[type[BaseException], ...], str], ...] = (
    ((TimeoutError, asyncio.TimeoutError, httpx.TimeoutException), TIMEOUT),
    ((ConnectionError, httpx.NetworkError), NETWORK_ERROR),
    ((json.JSONDecodeError,), PARSE_ERROR),
)


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _first_present(obj: Any, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = _lookup(obj, key)
        if value is not None and value != "":
            return value
    return None


def _extract_code(obj: Any) -> str | int | None:
    code = _first_present(obj, _CODE_FIELDS)
    if code is None:
        code = _first_present(_lookup(obj, "response"), _CODE_FIELDS)
    if code is None or isinstance(code, (str, int)):
        return code
    return str(code)


def _extract_message(obj: Any) -> str:
    message = _first_present(obj, _MESSAGE_FIELDS)
    if message is None:
        return UNKNOWN_ERROR_MESSAGE
    text = str(message).strip()
    return text or UNKNOWN_ERROR_MESSAGE


def _extract_details(obj: Any) -> Any:
    details = _lookup(obj, "data")
    if details is None:
        details = _lookup(_lookup(obj, "response"), "data")
    if details is None:
        details = _lookup(obj, "details")
    return details


def _sentinel_code(exc: BaseException) -> str | None:
    for types, code in _SENTINEL_CODES:
        if isinstance(exc, types):
            return code
    return None


def _format_stack(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(exc))


def _is_structured(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return any(hasattr(value, name) for name in _STRUCTURED_FIELDS)


class ErrorNormalizer:
    """Turns any raised value into a NormalizedError.

    Args:
        clock: Returns epoch milliseconds; injectable for deterministic tests.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or now_ms

    def normalize(self, value: Any) -> NormalizedError:
        """Normalize ``value``. Never raises."""
        try:
            return self._normalize(value)
        except Exception:
            return NormalizedError(message=UNKNOWN_ERROR_MESSAGE, timestamp=self._now())

    def _now(self) -> int:
        try:
            return int(self._clock())
        except Exception:
            return now_ms()

    def _normalize(self, value: Any) -> NormalizedError:
        timestamp = self._now()

        if isinstance(value, NormalizedError):
            # Re-normalizing restamps but keeps the payload.
            return NormalizedError(
                message=value.message or UNKNOWN_ERROR_MESSAGE,
                timestamp=timestamp,
                code=value.code,
                details=value.details,
                stack=value.stack,
            )

        if isinstance(value, BaseException):
            message = str(value).strip() or type(value).__name__
            code = _extract_code(value)
            if code is None:
                code = _sentinel_code(value)
            return NormalizedError(
                message=message,
                timestamp=timestamp,
                code=code,
                details=_extract_details(value),
                stack=_format_stack(value),
            )

        if isinstance(value, str):
            return NormalizedError(
                message=value.strip() or UNKNOWN_ERROR_MESSAGE,
                timestamp=timestamp,
            )

        if value is not None and _is_structured(value):
            stack = _lookup(value, "stack")
            return NormalizedError(
                message=_extract_message(value),
                timestamp=timestamp,
                code=_extract_code(value),
                details=_extract_details(value),
                stack=stack if isinstance(stack, str) else None,
            )

        return NormalizedError(message=UNKNOWN_ERROR_MESSAGE, timestamp=timestamp)


_default_normalizer = ErrorNormalizer()


def normalize(value: Any) -> NormalizedError:
    """Normalize ``value`` with the default wall clock."""
    return _default_normalizer.normalize(value)


__all__ = ["ErrorNormalizer", "normalize"]
