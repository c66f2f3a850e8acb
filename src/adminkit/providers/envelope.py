"""Backend response envelope.

Every backend call answers ``{code, message, data}``. A code other than 200
is a business failure; ``unwrap`` turns it into an ApiError so failures
always arrive as raised exceptions and never as returned values.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from adminkit.core.constants import DEFAULT_PAGE_SIZE, SUCCESS_CODE
from adminkit.core.errors.exceptions import ApiError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    code: int
    message: str = ""
    data: T | None = None

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE


class PageData(BaseModel, Generic[T]):
    """One page of a list endpoint. Serialized keys follow the wire format."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[T] = Field(default_factory=list, alias="list")
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, alias="pageSize")


def unwrap(response: ApiResponse[T] | Mapping[str, Any]) -> T | None:
    """Return the payload of a successful envelope.

    Raises:
        ApiError: If the envelope carries a non-success code.
    """
    if not isinstance(response, ApiResponse):
        response = ApiResponse[Any].model_validate(response)
    if response.code != SUCCESS_CODE:
        raise ApiError(response.message, code=response.code, data=response.data)
    return response.data


def unwrapping(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    """Decorate an envelope-returning provider so it returns the payload."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        return unwrap(await fn(*args, **kwargs))

    return wrapper


__all__ = ["ApiResponse", "PageData", "unwrap", "unwrapping"]
