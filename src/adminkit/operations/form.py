"""Form submission wrapper."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from adminkit.core.errors.exceptions import ConcurrentExecutionError
from adminkit.core.errors.models import NormalizedError, Severity
from adminkit.core.logging import get_logger
from adminkit.reporting.reporter import ErrorReporter, get_reporter

_logger = get_logger("operations.form")

T = TypeVar("T")


class FormSubmission(Generic[T]):
    """Loading/error state around a submit coroutine function.

    A failure goes to ``on_error`` when given, otherwise to the reporter at
    ERROR level. Either way it is re-raised to the caller. Only one
    submission runs at a time.

    Args:
        fn: Submit coroutine function.
        on_success: Called with the result after a successful submit.
        on_error: Replaces reporting for failures.
        success_message: Shown to the user after a successful submit.
        reporter: Reporter to use; defaults to the process-wide one.
        name: Name used in logs.
    """

    def __init__(
        self,
        fn: Callable[..., Awaitable[T]],
        *,
        on_success: Callable[[T], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        success_message: str | None = None,
        reporter: ErrorReporter | None = None,
        name: str | None = None,
    ) -> None:
        self._fn = fn
        self._on_success = on_success
        self._on_error = on_error
        self._success_message = success_message
        self._reporter = reporter
        self.name = name or getattr(fn, "__qualname__", "form")
        self._logger = _logger.bind(form=self.name)
        self._loading = False
        self._error: NormalizedError | None = None
        self._exception: BaseException | None = None
        self.last_result: T | None = None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> NormalizedError | None:
        return self._error

    @property
    def exception(self) -> BaseException | None:
        return self._exception

    async def submit(self, *args: Any, **kwargs: Any) -> T:
        """Run the submit function.

        Raises:
            ConcurrentExecutionError: If a submission is already running.
        """
        if self._loading:
            raise ConcurrentExecutionError(f"form {self.name!r} is already submitting")
        reporter = self._reporter or get_reporter()
        self._loading = True
        self._error = None
        self._exception = None
        try:
            result = await self._fn(*args, **kwargs)
            self.last_result = result
            if self._success_message:
                reporter.notify(self._success_message, Severity.INFO)
            if self._on_success is not None:
                self._on_success(result)
            self._logger.debug("form_submitted")
            return result
        except Exception as exc:
            self._exception = exc
            self._error = reporter.normalizer.normalize(exc)
            if self._on_error is not None:
                try:
                    self._on_error(exc)
                except Exception as handler_exc:
                    self._logger.warning("error_handler_failed", error=str(handler_exc))
            else:
                reporter.report(exc, Severity.ERROR)
            raise
        finally:
            self._loading = False


__all__ = ["FormSubmission"]
