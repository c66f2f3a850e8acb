"""User-facing notification capability.

Usage:
    from adminkit.notifications import RichConsoleNotifier
    from adminkit.reporting import get_reporter

    get_reporter().bind(notifier=RichConsoleNotifier())
"""

from adminkit.notifications.base import DialogRequest, Notifier
from adminkit.notifications.console import RichConsoleNotifier
from adminkit.notifications.mock import MockNotifier, SentMessage

__all__ = [
    "DialogRequest",
    "MockNotifier",
    "Notifier",
    "RichConsoleNotifier",
    "SentMessage",
]
