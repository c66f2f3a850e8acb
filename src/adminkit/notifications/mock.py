"""Recording notifier for tests."""

from __future__ import annotations

from dataclasses import dataclass

from adminkit.notifications.base import DialogRequest


@dataclass(frozen=True)
class SentMessage:
    level: str
    text: str


class MockNotifier:
    """Records every presentation call without showing anything.

    Dialogs are acknowledged immediately unless ``auto_acknowledge`` is off.
    """

    def __init__(self, *, auto_acknowledge: bool = True) -> None:
        self.messages: list[SentMessage] = []
        self.dialogs: list[DialogRequest] = []
        self._auto_acknowledge = auto_acknowledge
        self._fail_next = False

    def set_fail_next(self, should_fail: bool = True) -> None:
        """Make the next presentation call raise RuntimeError."""
        self._fail_next = should_fail

    def _check_failure(self) -> None:
        if self._fail_next:
            self._fail_next = False
            raise RuntimeError("notifier failure")

    def info(self, text: str) -> None:
        self._check_failure()
        self.messages.append(SentMessage("info", text))

    def warning(self, text: str) -> None:
        self._check_failure()
        self.messages.append(SentMessage("warning", text))

    def error(self, text: str) -> None:
        self._check_failure()
        self.messages.append(SentMessage("error", text))

    def critical_dialog(self, request: DialogRequest) -> None:
        self._check_failure()
        self.dialogs.append(request)
        if self._auto_acknowledge:
            request.acknowledge()

    def texts(self, level: str | None = None) -> list[str]:
        """Texts of recorded messages, optionally filtered by level."""
        return [m.text for m in self.messages if level is None or m.level == level]

    def clear(self) -> None:
        self.messages.clear()
        self.dialogs.clear()
