"""Async-data orchestration: single calls, paginated lists and form submissions."""

from adminkit.operations.async_op import (
    AsyncOperation,
    AsyncState,
    CacheEntry,
    ErrorOptions,
    freeze_args,
)
from adminkit.operations.form import FormSubmission
from adminkit.operations.paginated import PaginatedAsyncOperation, PaginationCursor

__all__ = [
    "AsyncOperation",
    "AsyncState",
    "CacheEntry",
    "ErrorOptions",
    "FormSubmission",
    "PaginatedAsyncOperation",
    "PaginationCursor",
    "freeze_args",
]
