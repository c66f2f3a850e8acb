"""Process-wide error reporting pipeline.

Every failure from an async operation, a form submission, a wrapped
coroutine or a host error hook flows through ``ErrorReporter.report``:

1. normalize the raised value and classify it at the declared level
2. log it on the diagnostic channel (error or warning severity)
3. clear the global loading flag and flag the progress indicator
4. present the user message (transient message, or a blocking dialog
   for CRITICAL)
5. forward it to the telemetry sink in production deployments

Reporting is purely observational. It never raises and never changes the
state of the operation that failed.

Example usage:
    reporter = ErrorReporter(ReporterConfig(environment="production"))
    reporter.bind(notifier=RichConsoleNotifier(), loading_state=GlobalLoadingState())
    set_reporter(reporter)

    try:
        await load_users()
    except ApiError as e:
        get_reporter().report(e, Severity.WARNING)
"""

from __future__ import annotations

import functools
import os
import platform
import socket
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from adminkit.core.config import ReporterConfig
from adminkit.core.errors.classifier import ErrorClassifier
from adminkit.core.errors.models import Classification, NormalizedError, Severity
from adminkit.core.errors.normalizer import ErrorNormalizer
from adminkit.core.logging import get_current_context, get_logger
from adminkit.notifications.base import DialogRequest, Notifier
from adminkit.reporting.loading import GlobalLoadingState, LoadingIndicator
from adminkit.reporting.telemetry import TelemetrySink, create_telemetry_sink

_logger = get_logger("reporting")

T = TypeVar("T")


@dataclass
class Capabilities:
    """UI capabilities the reporter can bind to. Any may be absent."""

    notifier: Notifier | None = None
    loading_indicator: LoadingIndicator | None = None
    loading_state: GlobalLoadingState | None = None


CapabilityResolver = Callable[[], Capabilities]


def _client_info() -> dict[str, Any]:
    return {
        "host": socket.gethostname(),
        "pid": os.getpid(),
        "runtime": f"{platform.python_implementation()} {platform.python_version()}",
    }


class ErrorReporter:
    """Normalizes, classifies, logs, presents and forwards errors.

    Capabilities are optional until bound. ``ensure_bound`` resolves them
    lazily through ``capability_resolver``; while none is available the
    reporter logs only.
    """

    def __init__(
        self,
        config: ReporterConfig | None = None,
        *,
        normalizer: ErrorNormalizer | None = None,
        classifier: ErrorClassifier | None = None,
        notifier: Notifier | None = None,
        loading_indicator: LoadingIndicator | None = None,
        loading_state: GlobalLoadingState | None = None,
        telemetry: TelemetrySink | None = None,
        capability_resolver: CapabilityResolver | None = None,
        location_provider: Callable[[], str | None] | None = None,
    ) -> None:
        self.config = config or ReporterConfig()
        self.normalizer = normalizer or ErrorNormalizer()
        self.classifier = classifier or ErrorClassifier()
        self._notifier = notifier
        self._loading_indicator = loading_indicator
        self._loading_state = loading_state
        self._telemetry = telemetry if telemetry is not None else create_telemetry_sink(
            self.config.telemetry
        )
        self._resolver = capability_resolver
        self._location_provider = location_provider
        self._warned_unbound = False
        self._bind_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Capability binding
    # ------------------------------------------------------------------

    @property
    def notifier(self) -> Notifier | None:
        return self._notifier

    @property
    def loading_indicator(self) -> LoadingIndicator | None:
        return self._loading_indicator

    @property
    def loading_state(self) -> GlobalLoadingState | None:
        return self._loading_state

    @property
    def telemetry(self) -> TelemetrySink | None:
        return self._telemetry

    @property
    def is_bound(self) -> bool:
        return self._notifier is not None

    def bind(
        self,
        *,
        notifier: Notifier | None = None,
        loading_indicator: LoadingIndicator | None = None,
        loading_state: GlobalLoadingState | None = None,
    ) -> None:
        """Bind capabilities explicitly. Arguments left as None keep the current binding."""
        with self._bind_lock:
            if notifier is not None:
                self._notifier = notifier
            if loading_indicator is not None:
                self._loading_indicator = loading_indicator
            if loading_state is not None:
                self._loading_state = loading_state

    def set_capability_resolver(self, resolver: CapabilityResolver | None) -> None:
        self._resolver = resolver
        self._warned_unbound = False

    def set_location_provider(self, provider: Callable[[], str | None] | None) -> None:
        self._location_provider = provider

    def ensure_bound(self) -> bool:
        """Resolve capabilities if not yet bound. Idempotent; never raises.

        Returns:
            True when a notifier is bound after the attempt.
        """
        if self._notifier is not None:
            return True
        if self._resolver is None:
            return False
        try:
            capabilities = self._resolver()
        except Exception as e:
            if not self._warned_unbound:
                _logger.warning("capabilities_unavailable", error=str(e))
                self._warned_unbound = True
            return False
        self.bind(
            notifier=capabilities.notifier,
            loading_indicator=capabilities.loading_indicator,
            loading_state=capabilities.loading_state,
        )
        return self._notifier is not None

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def classify(self, error: Any, level: Severity | str = Severity.ERROR) -> Classification:
        """Normalize and classify without any side effects."""
        return self.classifier.classify(self.normalizer.normalize(error), level)

    def report(
        self,
        error: Any,
        level: Severity | str = Severity.ERROR,
        show_to_user: bool | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Report ``error``. Never raises.

        Args:
            error: Any raised value.
            level: Caller-declared severity.
            show_to_user: Present the message; defaults to config.show_to_user.
            context: Extra metadata for the diagnostic log entry.
        """
        try:
            self._report(error, level, show_to_user, context)
        except Exception as e:
            _logger.warning("report_failed", error=str(e), original=repr(error))

    def _report(
        self,
        error: Any,
        level: Severity | str,
        show_to_user: bool | None,
        context: dict[str, Any] | None,
    ) -> None:
        self.ensure_bound()
        severity = Severity.parse(level)
        normalized = self.normalizer.normalize(error)
        classification = self.classifier.classify(normalized, severity)

        self._log(normalized, classification, context)
        self._reset_loading()

        show = self.config.show_to_user if show_to_user is None else show_to_user
        if show:
            self._present(classification.user_message, severity)

        if self.config.is_production and self._telemetry is not None:
            try:
                self._telemetry.report(normalized, severity)
            except Exception as e:
                _logger.warning("telemetry_report_failed", error=str(e))

    def _location(self) -> str | None:
        if self._location_provider is not None:
            try:
                return self._location_provider()
            except Exception:
                return None
        ctx = get_current_context()
        return ctx.route if ctx is not None else None

    def _log(
        self,
        normalized: NormalizedError,
        classification: Classification,
        context: dict[str, Any] | None,
    ) -> None:
        entry: dict[str, Any] = {
            "severity": classification.level.label,
            "error": normalized.to_dict(),
            "user_message": classification.user_message,
            "location": self._location(),
            "client": _client_info(),
        }
        if context:
            entry["context"] = context
        if classification.level.is_error_channel:
            _logger.error("error_handled", **entry)
        else:
            _logger.warning("error_handled", **entry)

    def _reset_loading(self) -> None:
        if self._loading_state is not None:
            try:
                self._loading_state.set_loading(False)
            except Exception as e:
                _logger.warning("loading_state_reset_failed", error=str(e))
        if self._loading_indicator is not None:
            try:
                self._loading_indicator.error()
            except Exception as e:
                _logger.warning("loading_indicator_error_failed", error=str(e))

    def _present(self, text: str, level: Severity) -> None:
        notifier = self._notifier
        if notifier is None:
            _logger.warning("notifier_unbound", user_message=text, severity=level.label)
            return
        try:
            if level is Severity.CRITICAL:
                notifier.critical_dialog(
                    DialogRequest(
                        title=self.config.critical_title,
                        content=text,
                        acknowledge_text=self.config.acknowledge_text,
                        on_acknowledge=lambda: _logger.info("critical_error_acknowledged"),
                    )
                )
            elif level is Severity.ERROR:
                notifier.error(text)
            elif level is Severity.WARNING:
                notifier.warning(text)
            else:
                notifier.info(text)
        except Exception as e:
            _logger.warning("notifier_failed", error=str(e), user_message=text)

    def notify(self, text: str, level: Severity | str = Severity.INFO) -> None:
        """Present a non-error message to the user. Never raises."""
        try:
            self.ensure_bound()
            self._present(text, Severity.parse(level))
        except Exception as e:
            _logger.warning("notify_failed", error=str(e))

    def handle_component_error(self, error: Any, instance: Any = None, info: str = "") -> None:
        """Handler for a UI framework's unrecovered component errors."""
        details = {"component_info": info, "instance": repr(instance)}
        if isinstance(error, BaseException):
            self.report(error, Severity.ERROR, context=details)
        else:
            self.report(
                {"message": getattr(error, "message", None) or str(error), "details": details},
                Severity.ERROR,
            )


# ----------------------------------------------------------------------
# Process-wide instance
# ----------------------------------------------------------------------

_reporter: ErrorReporter | None = None
_reporter_lock = threading.Lock()


def get_reporter() -> ErrorReporter:
    """Return the process-wide reporter, constructing it on first access."""
    global _reporter
    if _reporter is None:
        with _reporter_lock:
            if _reporter is None:
                _reporter = ErrorReporter()
    return _reporter


def set_reporter(reporter: ErrorReporter) -> ErrorReporter:
    """Install ``reporter`` as the process-wide instance (call at startup)."""
    global _reporter
    with _reporter_lock:
        _reporter = reporter
    return reporter


def reset_reporter() -> None:
    """Drop the process-wide instance. Intended for test isolation."""
    global _reporter
    with _reporter_lock:
        _reporter = None


# ----------------------------------------------------------------------
# Wrapper
# ----------------------------------------------------------------------


def _call_indicator(transition: Callable[[], None], event: str) -> None:
    try:
        transition()
    except Exception as e:
        _logger.warning(event, error=str(e))


def with_reporting(
    fn: Callable[..., Awaitable[T]] | None = None,
    *,
    level: Severity | str = Severity.ERROR,
    show_to_user: bool = True,
    manage_loading: bool = False,
    on_error: Callable[[BaseException], None] | None = None,
    reporter: ErrorReporter | None = None,
) -> Any:
    """Wrap a coroutine function so its failures are reported.

    Usable directly (``with_reporting(fetch, level="warning")``) or as a
    decorator (``@with_reporting(manage_loading=True)``). The original
    exception is always re-raised after reporting.

    Args:
        fn: Coroutine function to wrap.
        level: Severity used when reporting.
        show_to_user: Present the failure to the user.
        manage_loading: Drive the bound loading flag and progress indicator
            around the call.
        on_error: Replaces the reporter for failures when given.
        reporter: Reporter to use; defaults to the process-wide one.
    """

    def decorate(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            active = reporter or get_reporter()
            active.ensure_bound()
            loading_state = active.loading_state if manage_loading else None
            indicator = active.loading_indicator if manage_loading else None
            if loading_state is not None:
                loading_state.set_loading(True)
            if indicator is not None:
                _call_indicator(indicator.begin, "loading_indicator_begin_failed")
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                if on_error is not None:
                    if indicator is not None:
                        _call_indicator(indicator.error, "loading_indicator_error_failed")
                    try:
                        on_error(exc)
                    except Exception as handler_exc:
                        _logger.warning("error_handler_failed", error=str(handler_exc))
                else:
                    # report() moves the indicator to its error state.
                    active.report(exc, level, show_to_user)
                raise
            finally:
                if loading_state is not None:
                    loading_state.set_loading(False)
            if indicator is not None:
                _call_indicator(indicator.end, "loading_indicator_end_failed")
            return result

        return wrapper

    if fn is not None:
        return decorate(fn)
    return decorate


__all__ = [
    "Capabilities",
    "CapabilityResolver",
    "ErrorReporter",
    "get_reporter",
    "reset_reporter",
    "set_reporter",
    "with_reporting",
]
