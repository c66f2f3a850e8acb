"""Paginated loading on top of AsyncOperation.

Maintains an accumulated item list and a page cursor. Loading page 1
replaces the list; loading any later page appends to it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from adminkit.core.config import get_config
from adminkit.core.constants import DEFAULT_PAGE_SIZE
from adminkit.core.errors.models import NormalizedError
from adminkit.core.logging import get_logger
from adminkit.reporting.reporter import ErrorReporter
from adminkit.utils.task_utils import spawn_background

from .async_op import AsyncOperation, ErrorOptions

_logger = get_logger("operations.paginated")

T = TypeVar("T")


class PaginationCursor(BaseModel):
    """Page position and the total reported by the last response."""

    model_config = ConfigDict(validate_assignment=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    total: int = Field(default=0, ge=0)


def _read_page(result: Any) -> tuple[list[Any], int]:
    """Extract (items, total) from a page payload.

    Accepts a mapping with ``list``/``items`` and ``total`` keys, or an
    object exposing the same names as attributes.
    """
    if isinstance(result, Mapping):
        items = result.get("list")
        if items is None:
            items = result.get("items")
        total = result.get("total")
    else:
        items = getattr(result, "items", None)
        if items is None or callable(items):
            items = getattr(result, "list", None)
        total = getattr(result, "total", None)
    if items is None or total is None:
        raise TypeError(
            f"page payload must provide a list and a total, got {type(result).__name__}"
        )
    return list(items), int(total)


class PaginatedAsyncOperation(Generic[T]):
    """Accumulating page loader.

    Args:
        fn: Page provider; receives a copy of the cursor and returns a page
            payload (``list``/``items`` plus ``total``).
        page: Initial page number.
        page_size: Items per page; defaults to the configured
            ``default_page_size``.
        immediate: Schedule a load of the initial page at construction.
        error_options: Reporting options for failures.
        reporter: Reporter for failures; defaults to the process-wide one.
        name: Operation name used in logs.
    """

    def __init__(
        self,
        fn: Callable[[PaginationCursor], Awaitable[Any]],
        *,
        page: int = 1,
        page_size: int | None = None,
        immediate: bool = False,
        error_options: ErrorOptions | None = None,
        reporter: ErrorReporter | None = None,
        name: str | None = None,
    ) -> None:
        self._fn = fn
        self._initial_page = page
        if page_size is None:
            page_size = get_config().default_page_size
        self._cursor = PaginationCursor(page=page, page_size=page_size)
        self._items: list[T] = []
        self._epoch = 0
        self.name = name or getattr(fn, "__qualname__", "paginated")
        self._logger = _logger.bind(operation=self.name)
        self._operation: AsyncOperation[list[T]] = AsyncOperation(
            self._fetch_page,
            default=[],
            error_options=error_options,
            reporter=reporter,
            name=self.name,
        )

        self.initial_load = None
        if immediate:
            self.initial_load = spawn_background(
                self.load_page(page),
                self._logger,
                "initial_load_failed",
                name=f"{self.name}:initial",
                level="debug",
            )

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def data(self) -> list[T]:
        """Alias of ``items``."""
        return self.items

    @property
    def cursor(self) -> PaginationCursor:
        return self._cursor.model_copy()

    @property
    def has_more(self) -> bool:
        """True while fewer items are loaded than the last reported total."""
        return len(self._items) < self._cursor.total

    @property
    def loading(self) -> bool:
        return self._operation.loading

    @property
    def error(self) -> NormalizedError | None:
        return self._operation.error

    @property
    def exception(self) -> BaseException | None:
        return self._operation.exception

    def add_listener(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        return self._operation.add_listener(lambda _op: listener(self))

    async def _fetch_page(self) -> list[T]:
        epoch = self._epoch
        result = await self._fn(self._cursor.model_copy())
        items, total = _read_page(result)
        if epoch != self._epoch:
            return list(items)
        self._cursor.total = total
        if self._cursor.page == 1:
            self._items = items
        else:
            self._items.extend(items)
        self._logger.debug(
            "page_loaded",
            page=self._cursor.page,
            received=len(items),
            loaded=len(self._items),
            total=total,
        )
        return list(self._items)

    async def load_page(self, page: int) -> list[T]:
        """Load ``page`` into a fresh list, replacing anything loaded before.

        Waits until no load is in flight first, so concurrent jumps run one
        after the other and each gets its own page.

        Raises:
            ValueError: If page is less than 1.
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        while self._operation.in_flight:
            await self._operation.settle()
        self._cursor.page = page
        self._items = []
        return await self._operation.execute()

    async def load_more(self) -> list[T]:
        """Append the next page.

        No-op while everything is loaded. Awaits the in-flight load instead
        of starting another one. A failed load leaves the page unchanged
        unless the listing was reset meanwhile.
        """
        if self._operation.in_flight:
            return await self._operation.execute()
        if not self.has_more:
            return self.items
        epoch = self._epoch
        cursor = self._cursor
        cursor.page += 1
        try:
            return await self._operation.execute()
        except Exception:
            if epoch == self._epoch and self._cursor is cursor:
                cursor.page -= 1
            raise

    async def refresh(self) -> list[T]:
        """Reload from page 1."""
        return await self.load_page(1)

    def reset(self) -> None:
        """Drop all items and return to the initial page."""
        self._epoch += 1
        self._operation.reset()
        self._items = []
        self._cursor = PaginationCursor(
            page=self._initial_page, page_size=self._cursor.page_size
        )


__all__ = ["PaginatedAsyncOperation", "PaginationCursor"]
