"""Data providers: the backend envelope and in-memory mock endpoints."""

from adminkit.providers.envelope import ApiResponse, PageData, unwrap, unwrapping
from adminkit.providers.mock import (
    CreateUserData,
    GPUInstance,
    MemoryUsage,
    MockInstanceProvider,
    MockUserProvider,
    UpdateUserData,
    User,
)
from adminkit.providers.orders import MockOrderProvider, Order, OrderStats, OrderStatus

__all__ = [
    "ApiResponse",
    "CreateUserData",
    "GPUInstance",
    "MemoryUsage",
    "MockInstanceProvider",
    "MockOrderProvider",
    "MockUserProvider",
    "Order",
    "OrderStats",
    "OrderStatus",
    "PageData",
    "UpdateUserData",
    "User",
    "unwrap",
    "unwrapping",
]
