"""Time utilities for adminkit.

Provides timezone-aware wall-clock helpers and the millisecond clocks used
for error timestamps and cache expiry.
"""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Return the current wall-clock time as integer epoch milliseconds.

    Used to stamp normalized errors; never used for expiry arithmetic.
    """
    return time.time_ns() // 1_000_000


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds.

    Cache freshness is measured with this clock.
    """
    return time.monotonic() * 1000.0
