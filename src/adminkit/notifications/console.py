"""Terminal notifier built on rich.

Transient messages are printed as single styled lines. Critical dialogs
are rendered as a red Panel; in interactive mode the user must press
Enter to acknowledge, otherwise the dialog acknowledges itself once shown.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from adminkit.core.logging import get_logger
from adminkit.notifications.base import DialogRequest

_logger = get_logger("notifications.console")


class LevelStyles:
    """Rich styles per presentation level."""

    INFO = "cyan"
    WARNING = "yellow"
    ERROR = "bold red"
    CRITICAL = "red"


class RichConsoleNotifier:
    """Notifier that writes to a rich Console.

    Example usage:
        notifier = RichConsoleNotifier(interactive=True)
        get_reporter().bind(notifier=notifier)
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        interactive: bool = False,
    ) -> None:
        """Initialize the console notifier.

        Args:
            console: Console to write to. Defaults to a stderr console.
            interactive: Wait for Enter before acknowledging critical dialogs.
        """
        self._console = console or Console(stderr=True)
        self._interactive = interactive

    def _line(self, prefix: str, text: str, style: str) -> None:
        # User text is never parsed as markup.
        self._console.print(Text.assemble((prefix, style), " ", text), highlight=False)

    def info(self, text: str) -> None:
        self._line("info", text, LevelStyles.INFO)

    def warning(self, text: str) -> None:
        self._line("warning", text, LevelStyles.WARNING)

    def error(self, text: str) -> None:
        self._line("error", text, LevelStyles.ERROR)

    def critical_dialog(self, request: DialogRequest) -> None:
        self._console.print(
            Panel(
                Text(request.content),
                title=Text(request.title),
                border_style=LevelStyles.CRITICAL,
                subtitle=Text(f"[{request.acknowledge_text}]"),
            )
        )
        if self._interactive:
            Prompt.ask(
                Text(f"Press Enter to {request.acknowledge_text}"),
                console=self._console,
                default="",
                show_default=False,
            )
        try:
            request.acknowledge()
        except Exception as e:
            _logger.warning("dialog_acknowledge_failed", error=str(e))
