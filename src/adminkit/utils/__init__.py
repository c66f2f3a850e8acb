"""Shared utilities for adminkit.

Contains cross-cutting utilities used by multiple modules.
"""

from adminkit.utils.task_utils import log_task_exception, spawn_background
from adminkit.utils.time import monotonic_ms, now_ms, utc_now

__all__ = [
    "log_task_exception",
    "monotonic_ms",
    "now_ms",
    "spawn_background",
    "utc_now",
]
