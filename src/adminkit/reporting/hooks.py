"""Host-runtime error hooks.

Routes otherwise-unhandled failures through the reporter at ERROR level:

- uncaught synchronous errors (``sys.excepthook`` and ``threading.excepthook``)
- unobserved failed tasks and futures (the asyncio loop exception handler)
- unrecovered UI component errors (``HookRegistration.component_error_handler``,
  attached by the host framework)

Installed hooks replace the previous handlers rather than chaining to
them, so a handled error is not printed a second time by the runtime.
Install once at process start and keep the registration; ``uninstall``
restores the previous handlers for test isolation.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from types import TracebackType
from typing import Any

from adminkit.core.errors.models import Severity
from adminkit.core.logging import get_logger
from adminkit.reporting.reporter import ErrorReporter, get_reporter

_logger = get_logger("reporting.hooks")

_registration: HookRegistration | None = None


class HookRegistration:
    """Handle for installed hooks."""

    def __init__(self, reporter: ErrorReporter) -> None:
        self.reporter = reporter
        self.installed = False
        self._previous_excepthook = sys.excepthook
        self._previous_threading_hook = threading.excepthook
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous_loop_handler: Any = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def _install(self) -> None:
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook
        self.installed = True

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install the exception handler on ``loop`` (one loop per registration)."""
        if self._loop is loop:
            return
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_loop_handler)
        self._loop = loop
        self._previous_loop_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._loop_exception_handler)

    def uninstall(self) -> None:
        """Restore the previous handlers. Idempotent."""
        global _registration
        if not self.installed:
            return
        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_hook
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(self._previous_loop_handler)
        self._loop = None
        self.installed = False
        if _registration is self:
            _registration = None

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value or exc_type(), tb)
            return
        self.reporter.report(
            exc_value if exc_value is not None else exc_type(),
            Severity.ERROR,
            context={"hook": "uncaught"},
        )

    def _threading_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread is not None else None
        self.reporter.report(
            args.exc_value if args.exc_value is not None else args.exc_type(),
            Severity.ERROR,
            context={"hook": "thread", "thread": thread_name},
        )

    def _loop_exception_handler(
        self,
        loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        exc = context.get("exception")
        task = context.get("task") or context.get("future")
        metadata: dict[str, Any] = {"hook": "unobserved", "message": context.get("message")}
        if isinstance(task, asyncio.Task):
            metadata["task"] = task.get_name()
        if exc is not None:
            self.reporter.report(exc, Severity.ERROR, context=metadata)
        else:
            self.reporter.report(
                context.get("message") or "unobserved asynchronous failure",
                Severity.ERROR,
                context=metadata,
            )

    def component_error_handler(self, error: Any, instance: Any = None, info: str = "") -> None:
        """Attach to the UI framework's unrecovered-component-error hook."""
        self.reporter.handle_component_error(error, instance, info)


def install_global_hooks(
    reporter: ErrorReporter | None = None,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> HookRegistration:
    """Install the reporter as the host's error hooks.

    Returns the existing registration when hooks are already installed.

    Args:
        reporter: Reporter to route through; defaults to the process-wide one.
        loop: Event loop whose exception handler to replace; defaults to
            the running loop, if any.
    """
    global _registration
    if _registration is not None and _registration.installed:
        if loop is not None:
            _registration.attach_loop(loop)
        return _registration

    registration = HookRegistration(reporter or get_reporter())
    registration._install()
    if loop is None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
    if loop is not None:
        registration.attach_loop(loop)

    _registration = registration
    _logger.debug("global_hooks_installed", loop_attached=loop is not None)
    return registration


def get_registration() -> HookRegistration | None:
    """Current hook registration, if installed."""
    return _registration


__all__ = ["HookRegistration", "get_registration", "install_global_hooks"]
