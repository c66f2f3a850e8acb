"""Notifier capability: how reported errors reach the user.

A notifier presents transient messages at three levels and a blocking
dialog that needs an explicit acknowledgement. Implementations must not
raise from their presentation methods. The reporter still guards every
call, because a presentation failure must never mask the original error.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class DialogRequest:
    """A blocking dialog awaiting acknowledgement."""

    title: str
    """Dialog header."""

    content: str
    """Body text, usually the resolved user message."""

    acknowledge_text: str = "OK"
    """Label of the acknowledgement action."""

    on_acknowledge: Callable[[], None] | None = None
    """Invoked once the user acknowledges the dialog."""

    def acknowledge(self) -> None:
        """Run the acknowledgement action, if any."""
        if self.on_acknowledge is not None:
            self.on_acknowledge()


@runtime_checkable
class Notifier(Protocol):
    """Protocol for user-facing presentation backends."""

    def info(self, text: str) -> None:
        """Show a transient informational message."""
        ...

    def warning(self, text: str) -> None:
        """Show a transient warning message."""
        ...

    def error(self, text: str) -> None:
        """Show a transient error message."""
        ...

    def critical_dialog(self, request: DialogRequest) -> None:
        """Show a blocking dialog requiring acknowledgement."""
        ...
