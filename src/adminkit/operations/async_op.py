"""AsyncOperation: lifecycle, caching and failure reporting for one provider call.

An AsyncOperation wraps a single provider coroutine function and owns the
UI-bound state around it: ``data``, ``loading`` and the last ``error``.

State transitions:
- execute: loading=True, error cleared, optional reset of data to the default
  (all before the provider is awaited), then data set on success or error
  recorded on failure, and loading=False on every exit path
- refresh: cache dropped, then execute with the last arguments
- retry: execute with the last arguments, cache untouched
- reset: data back to the default; loading, error, cache and arguments cleared

Caching (``cache_ttl_ms > 0``): a call whose key matches the cached call and
whose entry is younger than the TTL returns the cached value without
invoking the provider and without toggling ``loading``.

At most one execution is in flight per instance. A concurrent call with the
same key awaits the in-flight result instead of invoking the provider
again. A concurrent call with a different key raises
ConcurrentExecutionError.

Example usage:
    users = AsyncOperation(provider.list_users, default=[], cache_ttl_ms=30_000)
    await users.execute(cursor)
    if users.error:
        ...
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Awaitable, Callable, Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from adminkit.core.errors.exceptions import ConcurrentExecutionError
from adminkit.core.errors.models import NormalizedError, Severity
from adminkit.core.logging import get_logger
from adminkit.reporting.reporter import ErrorReporter, get_reporter
from adminkit.utils.task_utils import spawn_background
from adminkit.utils.time import monotonic_ms

_logger = get_logger("operations")

T = TypeVar("T")

Listener = Callable[[Any], None]


@dataclass(frozen=True)
class ErrorOptions:
    """How an operation's failures are reported.

    ``show_to_user=False`` skips reporting entirely; the error is still
    recorded and re-raised.
    """

    show_to_user: bool = True
    level: Severity = Severity.ERROR


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    key: Hashable
    fetched_at: float
    """Monotonic milliseconds at which the value was fetched."""


@dataclass(frozen=True)
class AsyncState(Generic[T]):
    """Point-in-time snapshot of an operation's state."""

    data: T | None
    loading: bool
    error: NormalizedError | None
    last_args: tuple[Any, ...] = ()
    last_kwargs: dict[str, Any] = field(default_factory=dict)
    cache: CacheEntry[T] | None = None


def _freeze(value: Any) -> Hashable:
    if value is None or isinstance(value, (str, bytes, int, float, bool, Enum)):
        return value
    if isinstance(value, BaseModel):
        return _freeze(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _freeze(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda item: repr(item[0]))
        return ("map", tuple((k, _freeze(v)) for k, v in items))
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(_freeze(v) for v in value))
    if isinstance(value, (set, frozenset)):
        return ("set", frozenset(_freeze(v) for v in value))
    raise TypeError(f"cannot derive a cache key from {type(value).__name__}")


def freeze_args(args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> Hashable:
    """Build a hashable key that compares equal for deep-equal arguments.

    Only plain values are supported: None, str, bytes, numbers, enums,
    mappings, sequences, sets, dataclasses and pydantic models of those.

    Raises:
        TypeError: If an argument is not a plain value.
    """
    return (_freeze(args), _freeze(dict(kwargs)))


class AsyncOperation(Generic[T]):
    """Loading/error/data state around a provider coroutine function.

    Args:
        fn: Provider coroutine function.
        default: Value of ``data`` before the first success and after reset.
        immediate: Schedule ``execute()`` on the running loop at construction.
        reset_to_default: Reset ``data`` to the default before each execution.
        error_options: Reporting options for failures.
        transform: Applied to the provider result before it is stored.
        cache_ttl_ms: Cache lifetime in milliseconds; 0 disables caching.
        cache_key: Builds the cache key from the call arguments, replacing
            the default deep-equality key.
        reporter: Reporter for failures; defaults to the process-wide one.
        clock: Monotonic clock in milliseconds.
        name: Operation name used in logs.

    Raises:
        ValueError: If cache_ttl_ms is negative.
        RuntimeError: If immediate is set and no event loop is running.
    """

    def __init__(
        self,
        fn: Callable[..., Awaitable[Any]],
        *,
        default: T | None = None,
        immediate: bool = False,
        reset_to_default: bool = False,
        error_options: ErrorOptions | None = None,
        transform: Callable[[Any], T] | None = None,
        cache_ttl_ms: float = 0,
        cache_key: Callable[..., Hashable] | None = None,
        reporter: ErrorReporter | None = None,
        clock: Callable[[], float] | None = None,
        name: str | None = None,
    ) -> None:
        if cache_ttl_ms < 0:
            raise ValueError(f"cache_ttl_ms must be >= 0, got {cache_ttl_ms}")
        self._fn = fn
        self._default = default
        self._reset_to_default = reset_to_default
        self._error_options = error_options or ErrorOptions()
        self._transform = transform
        self._cache_ttl_ms = cache_ttl_ms
        self._cache_key_fn = cache_key
        self._reporter = reporter
        self._clock = clock or monotonic_ms
        self.name = name or getattr(fn, "__qualname__", "operation")
        self._logger = _logger.bind(operation=self.name)

        self._data: T | None = default
        self._loading = False
        self._error: NormalizedError | None = None
        self._exception: BaseException | None = None
        self._last_args: tuple[Any, ...] = ()
        self._last_kwargs: dict[str, Any] = {}
        self._cache: CacheEntry[T] | None = None
        self._inflight: asyncio.Future[T] | None = None
        self._inflight_key: Hashable | None = None
        self._generation = 0
        self._listeners: list[Listener] = []

        self.initial_load: asyncio.Task[Any] | None = None
        if immediate:
            self.initial_load = spawn_background(
                self.execute(),
                self._logger,
                "initial_load_failed",
                name=f"{self.name}:initial",
                level="debug",
            )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def data(self) -> T | None:
        return self._data

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> NormalizedError | None:
        """Normalized form of the last failure, None after a success or reset."""
        return self._error

    @property
    def exception(self) -> BaseException | None:
        """The exception the provider raised last, as raised."""
        return self._exception

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    @property
    def has_valid_cache(self) -> bool:
        cache = self._cache
        if self._cache_ttl_ms <= 0 or cache is None:
            return False
        return self._clock() - cache.fetched_at < self._cache_ttl_ms

    @property
    def state(self) -> AsyncState[T]:
        return AsyncState(
            data=self._data,
            loading=self._loading,
            error=self._error,
            last_args=self._last_args,
            last_kwargs=dict(self._last_kwargs),
            cache=self._cache,
        )

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(self)`` after every state change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                self._logger.warning("listener_failed", error=str(e))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _key_for(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Hashable | None:
        try:
            if self._cache_key_fn is not None:
                return self._cache_key_fn(*args, **kwargs)
            return freeze_args(args, kwargs)
        except Exception as e:
            self._logger.debug("cache_key_unavailable", error=str(e))
            return None

    async def settle(self) -> None:
        """Wait for an in-flight execution to finish, ignoring its outcome."""
        inflight = self._inflight
        if inflight is None:
            return
        try:
            await asyncio.shield(inflight)
        except Exception:
            pass

    async def execute(self, *args: Any, **kwargs: Any) -> T:
        """Invoke the provider with ``args`` and store the result.

        Raises:
            ConcurrentExecutionError: If another execution with a different
                key is in flight.
            Exception: Whatever the provider raised, after it is reported.
        """
        key = self._key_for(args, kwargs)

        if self._inflight is not None:
            if key is not None and key == self._inflight_key:
                self._logger.debug("execute_coalesced")
                return await asyncio.shield(self._inflight)
            raise ConcurrentExecutionError(
                f"operation {self.name!r} is already executing with different arguments"
            )

        cache = self._cache
        if key is not None and cache is not None and cache.key == key and self.has_valid_cache:
            self._logger.debug("cache_hit")
            if self._data is not cache.value:
                self._data = cache.value
                self._emit()
            return cache.value

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._inflight = future
        self._inflight_key = key
        generation = self._generation

        self._last_args = args
        self._last_kwargs = dict(kwargs)
        self._loading = True
        self._error = None
        self._exception = None
        if self._reset_to_default:
            self._data = self._default
        self._emit()

        try:
            result = await self._fn(*args, **kwargs)
            value: T = self._transform(result) if self._transform is not None else result
        except Exception as exc:
            self._on_failure(exc, generation)
            future.set_exception(exc)
            # Mark retrieved; coalesced waiters still receive it.
            future.exception()
            raise
        else:
            if generation == self._generation:
                self._data = value
                if self._cache_ttl_ms > 0 and key is not None:
                    self._cache = CacheEntry(value=value, key=key, fetched_at=self._clock())
            future.set_result(value)
        finally:
            if not future.done():
                future.cancel()
            if self._inflight is future:
                self._inflight = None
                self._inflight_key = None
            # A reset since the call started owns the state now.
            if generation == self._generation:
                self._loading = False
                self._emit()
        return value

    def _on_failure(self, exc: Exception, generation: int) -> None:
        reporter = self._reporter or get_reporter()
        if generation == self._generation:
            self._exception = exc
            self._error = reporter.normalizer.normalize(exc)
        self._logger.debug("execute_failed", error=str(exc))
        if self._error_options.show_to_user is not False:
            reporter.report(exc, self._error_options.level, show_to_user=True)

    async def refresh(self) -> T:
        """Drop the cache and execute with the last arguments."""
        self._cache = None
        return await self.execute(*self._last_args, **self._last_kwargs)

    async def retry(self) -> T:
        """Execute with the last arguments, keeping the cache."""
        return await self.execute(*self._last_args, **self._last_kwargs)

    def reset(self) -> None:
        """Restore the initial state. Idempotent.

        An execution still in flight completes for its caller but no longer
        writes ``data``, the cache or ``loading``. The next ``execute`` starts
        a new provider call instead of joining it.
        """
        self._generation += 1
        self._inflight = None
        self._inflight_key = None
        self._data = self._default
        self._loading = False
        self._error = None
        self._exception = None
        self._cache = None
        self._last_args = ()
        self._last_kwargs = {}
        self._emit()
