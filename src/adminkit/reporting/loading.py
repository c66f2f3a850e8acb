"""Process-wide loading capabilities.

Two shared indicators exist in a dashboard process:

- a progress indicator (``LoadingIndicator``) with begin/end/error
  transitions, typically a bar at the top of the page
- the global loading flag (``GlobalLoadingState``) that drives a
  full-screen spinner and its caption

Both are single-writer by convention; cooperative scheduling serializes
writers, so neither holds a lock.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from adminkit.core.constants import DEFAULT_LOADING_TEXT


@runtime_checkable
class LoadingIndicator(Protocol):
    """Protocol for progress indicators."""

    def begin(self) -> None: ...

    def end(self) -> None: ...

    def error(self) -> None: ...


class LoadingBarStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    FINISHED = "finished"
    ERROR = "error"


class LoadingBar:
    """In-process progress indicator that records its transitions."""

    def __init__(self) -> None:
        self.status = LoadingBarStatus.IDLE
        self.begin_count = 0
        self.end_count = 0
        self.error_count = 0

    def begin(self) -> None:
        self.status = LoadingBarStatus.LOADING
        self.begin_count += 1

    def end(self) -> None:
        self.status = LoadingBarStatus.FINISHED
        self.end_count += 1

    def error(self) -> None:
        self.status = LoadingBarStatus.ERROR
        self.error_count += 1


class GlobalLoadingState:
    """Global loading flag with a caption."""

    def __init__(self) -> None:
        self.is_loading = False
        self.loading_text = DEFAULT_LOADING_TEXT

    def set_loading(self, loading: bool, text: str = DEFAULT_LOADING_TEXT) -> None:
        self.is_loading = loading
        self.loading_text = text
