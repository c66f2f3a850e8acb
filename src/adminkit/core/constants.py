"""Global constants for adminkit.

Centralizes user-facing message text, sentinel error codes and defaults,
making them discoverable, consistent, and easy to modify.
"""

# =============================================================================
# Sentinel error codes
# =============================================================================

NETWORK_ERROR = "NETWORK_ERROR"
"""Code for failures to reach the data provider at all."""

TIMEOUT = "TIMEOUT"
"""Code for provider calls that did not complete in time."""

PARSE_ERROR = "PARSE_ERROR"
"""Code for provider payloads that could not be decoded."""

# =============================================================================
# User-facing messages
# =============================================================================

USER_MESSAGES: dict[str, str] = {
    "400": "invalid request parameters",
    "401": "unauthorized, please sign in again",
    "403": "access denied",
    "404": "resource not found",
    "500": "internal server error",
    "502": "gateway error",
    "503": "service unavailable",
    "504": "request timed out",
    NETWORK_ERROR: "network connection error",
    TIMEOUT: "request timed out",
    PARSE_ERROR: "data parse error",
}
"""Static code -> message table. Keys are the string form of the code."""

NETWORK_FAILURE_MESSAGE = "network connection failed, please check your network settings"
TIMEOUT_MESSAGE = "request timed out, please try again later"
DATA_FORMAT_MESSAGE = "invalid data format"
GENERIC_FAILURE_MESSAGE = "operation failed, please retry"
UNKNOWN_ERROR_MESSAGE = "unknown error"

CRITICAL_DIALOG_TITLE = "Critical error"
ACKNOWLEDGE_TEXT = "OK"
DEFAULT_LOADING_TEXT = "Loading..."

# =============================================================================
# Operation defaults
# =============================================================================

DEFAULT_PAGE_SIZE = 10
"""Page size used by paginated operations when none is given."""

SUCCESS_CODE = 200
"""Envelope code signalling a successful provider response."""

MOCK_PROVIDER_DELAY_MS = 300
"""Simulated latency of the mock data providers."""

TELEMETRY_TIMEOUT_SECONDS = 5.0
"""Default HTTP timeout for telemetry posts."""

TRUNCATE_STACK_CHARS = 4000
"""Maximum characters of a stack trace forwarded to telemetry."""
