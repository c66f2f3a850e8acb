"""Deterministic in-memory providers for the admin dashboard.

They answer with the same envelopes as the backend, after a simulated
latency, so operations can be exercised without a network.

Example usage:
    users = MockUserProvider(delay_ms=0)
    listing = PaginatedAsyncOperation(unwrapping(users.list_users))
    await listing.load_page(1)
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from adminkit.core.constants import MOCK_PROVIDER_DELAY_MS, SUCCESS_CODE
from adminkit.core.logging import get_logger
from adminkit.operations.paginated import PaginationCursor
from adminkit.utils.time import utc_now

from .envelope import ApiResponse, PageData

_logger = get_logger("providers.mock")

UserStatus = Literal["active", "inactive"]
UserRole = Literal["admin", "user"]
InstanceType = Literal["RTX3080", "RTX3090", "RTX4090", "A100"]
InstanceStatus = Literal["online", "offline", "using", "maintenance"]

MOCK_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

INSTANCE_TYPES: tuple[InstanceType, ...] = ("RTX3080", "RTX3090", "RTX4090", "A100")
INSTANCE_STATUSES: tuple[InstanceStatus, ...] = ("online", "offline", "using", "maintenance")
MEMORY_GB: dict[str, int] = {"RTX3080": 10, "RTX3090": 24, "RTX4090": 24, "A100": 80}


class User(BaseModel):
    id: str
    username: str
    email: str
    avatar: str | None = None
    status: UserStatus = "active"
    role: UserRole = "user"
    created_at: datetime
    last_login: datetime | None = None
    phone: str | None = None
    real_name: str | None = None


class CreateUserData(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    role: UserRole = "user"
    real_name: str | None = None
    phone: str | None = None


class UpdateUserData(BaseModel):
    """Partial user update; fields left as None are not changed."""

    username: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    role: UserRole | None = None
    status: UserStatus | None = None
    real_name: str | None = None
    phone: str | None = None


class MemoryUsage(BaseModel):
    used: int = Field(ge=0)
    total: int = Field(ge=0)


class GPUInstance(BaseModel):
    id: str
    name: str
    type: InstanceType
    status: InstanceStatus
    usage: int = Field(ge=0, le=100)
    temperature: int
    memory: MemoryUsage
    user_id: str | None = None
    user_name: str | None = None
    created_at: datetime
    last_heartbeat: datetime


def paginate(items: list[Any], cursor: PaginationCursor) -> PageData[Any]:
    start = (cursor.page - 1) * cursor.page_size
    return PageData(
        items=items[start:start + cursor.page_size],
        total=len(items),
        page=cursor.page,
        page_size=cursor.page_size,
    )


class MockProviderBase:
    def __init__(self, *, delay_ms: float = MOCK_PROVIDER_DELAY_MS) -> None:
        self.delay_ms = delay_ms

    async def _delay(self) -> None:
        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)


class MockUserProvider(MockProviderBase):
    """User endpoints backed by a seeded in-memory list.

    Args:
        count: Number of users to generate.
        seed: Random seed; equal seeds produce equal data.
        delay_ms: Simulated latency per call.
    """

    def __init__(
        self,
        count: int = 100,
        *,
        seed: int = 0,
        delay_ms: float = MOCK_PROVIDER_DELAY_MS,
    ) -> None:
        super().__init__(delay_ms=delay_ms)
        rng = random.Random(seed)
        self._users: list[User] = [self._generate(i, rng) for i in range(1, count + 1)]
        self._next_id = count + 1

    @staticmethod
    def _generate(index: int, rng: random.Random) -> User:
        created = MOCK_EPOCH + timedelta(days=index)
        return User(
            id=str(index),
            username="admin" if index == 1 else f"user{index:03d}",
            email="admin@example.com" if index == 1 else f"user{index:03d}@example.com",
            avatar=f"https://avatars.githubusercontent.com/u/{index}?v=4",
            status="active" if index == 1 or rng.random() > 0.2 else "inactive",
            role="admin" if index == 1 or rng.random() < 0.1 else "user",
            created_at=created,
            last_login=created + timedelta(hours=rng.randint(1, 24 * 200)),
            phone=f"138{index:08d}",
            real_name=f"User {index}",
        )

    @property
    def users(self) -> list[User]:
        return list(self._users)

    async def list_users(
        self,
        cursor: PaginationCursor,
        search: str | None = None,
        status: UserStatus | None = None,
        role: UserRole | None = None,
    ) -> ApiResponse[PageData[User]]:
        await self._delay()
        matches = self._users
        if search:
            needle = search.lower()
            matches = [
                u for u in matches
                if needle in u.username.lower()
                or needle in u.email.lower()
                or (u.real_name is not None and needle in u.real_name.lower())
            ]
        if status:
            matches = [u for u in matches if u.status == status]
        if role:
            matches = [u for u in matches if u.role == role]
        _logger.debug("list_users", page=cursor.page, matched=len(matches))
        return ApiResponse(code=SUCCESS_CODE, message="success", data=paginate(matches, cursor))

    async def get_user(self, user_id: str) -> ApiResponse[User]:
        await self._delay()
        for user in self._users:
            if user.id == user_id:
                return ApiResponse(code=SUCCESS_CODE, message="success", data=user)
        return ApiResponse(code=404, message="user not found", data=None)

    async def create_user(
        self, payload: CreateUserData | Mapping[str, Any]
    ) -> ApiResponse[User]:
        """Create a user.

        Raises:
            pydantic.ValidationError: If the payload is malformed.
        """
        await self._delay()
        data = (
            payload if isinstance(payload, CreateUserData)
            else CreateUserData.model_validate(payload)
        )
        user = User(
            id=str(self._next_id),
            username=data.username,
            email=data.email,
            role=data.role,
            created_at=utc_now(),
            phone=data.phone,
            real_name=data.real_name,
        )
        self._next_id += 1
        self._users.append(user)
        _logger.info("user_created", user_id=user.id)
        return ApiResponse(code=SUCCESS_CODE, message="user created", data=user)

    def _index_of(self, user_id: str) -> int | None:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None

    async def update_user(
        self, user_id: str, payload: UpdateUserData | Mapping[str, Any]
    ) -> ApiResponse[User]:
        """Apply the fields set in ``payload``; unknown ids answer 404.

        Raises:
            pydantic.ValidationError: If the payload is malformed.
        """
        await self._delay()
        data = (
            payload if isinstance(payload, UpdateUserData)
            else UpdateUserData.model_validate(payload)
        )
        index = self._index_of(user_id)
        if index is None:
            return ApiResponse(code=404, message="user not found", data=None)
        user = self._users[index].model_copy(update=data.model_dump(exclude_none=True))
        self._users[index] = user
        _logger.info("user_updated", user_id=user_id)
        return ApiResponse(code=SUCCESS_CODE, message="user updated", data=user)

    async def delete_user(self, user_id: str) -> ApiResponse[None]:
        await self._delay()
        index = self._index_of(user_id)
        if index is None:
            return ApiResponse(code=404, message="user not found", data=None)
        del self._users[index]
        _logger.info("user_deleted", user_id=user_id)
        return ApiResponse(code=SUCCESS_CODE, message="user deleted", data=None)

    async def batch_delete_users(self, user_ids: list[str]) -> ApiResponse[None]:
        """Delete every known id in ``user_ids``; unknown ids are skipped."""
        await self._delay()
        doomed = set(user_ids)
        before = len(self._users)
        self._users = [u for u in self._users if u.id not in doomed]
        deleted = before - len(self._users)
        _logger.info("users_deleted", requested=len(doomed), deleted=deleted)
        return ApiResponse(code=SUCCESS_CODE, message=f"deleted {deleted} users", data=None)

    async def reset_password(self, user_id: str) -> ApiResponse[None]:
        await self._delay()
        if self._index_of(user_id) is None:
            return ApiResponse(code=404, message="user not found", data=None)
        _logger.info("password_reset", user_id=user_id)
        return ApiResponse(code=SUCCESS_CODE, message="password reset", data=None)


class MockInstanceProvider(MockProviderBase):
    """GPU instance endpoints backed by a seeded in-memory list.

    Types and statuses rotate with the index so every combination is
    present in a small fleet.
    """

    def __init__(
        self,
        count: int = 50,
        *,
        seed: int = 0,
        delay_ms: float = MOCK_PROVIDER_DELAY_MS,
    ) -> None:
        super().__init__(delay_ms=delay_ms)
        rng = random.Random(seed)
        self._instances = [self._generate(i, rng) for i in range(1, count + 1)]

    @staticmethod
    def _generate(index: int, rng: random.Random) -> GPUInstance:
        kind = INSTANCE_TYPES[(index - 1) % len(INSTANCE_TYPES)]
        status = INSTANCE_STATUSES[(index - 1) % len(INSTANCE_STATUSES)]
        idle = status in ("offline", "maintenance")
        total = MEMORY_GB[kind]
        return GPUInstance(
            id=str(index),
            name=f"GPU-Server-{index:03d}",
            type=kind,
            status=status,
            usage=0 if idle else rng.randint(0, 99),
            temperature=rng.randint(30, 49) if status == "offline" else rng.randint(50, 89),
            memory=MemoryUsage(used=0 if idle else rng.randint(0, int(total * 0.8)), total=total),
            user_id=f"user{index}" if status == "using" else None,
            user_name=f"User {index}" if status == "using" else None,
            created_at=datetime(2024, 1, 15, 8, tzinfo=timezone.utc),
            last_heartbeat=MOCK_EPOCH + timedelta(days=index),
        )

    @property
    def instances(self) -> list[GPUInstance]:
        return list(self._instances)

    async def list_instances(
        self,
        cursor: PaginationCursor,
        search: str | None = None,
        status: InstanceStatus | None = None,
        type: str | None = None,
    ) -> ApiResponse[PageData[GPUInstance]]:
        await self._delay()
        matches = self._instances
        if search:
            needle = search.lower()
            matches = [
                i for i in matches
                if needle in i.name.lower()
                or needle in i.type.lower()
                or (i.user_name is not None and needle in i.user_name.lower())
            ]
        if status:
            matches = [i for i in matches if i.status == status]
        if type:
            matches = [i for i in matches if i.type == type]
        _logger.debug("list_instances", page=cursor.page, matched=len(matches))
        return ApiResponse(code=SUCCESS_CODE, message="success", data=paginate(matches, cursor))

    def _transition(
        self, instance_id: str, status: InstanceStatus, event: str, message: str
    ) -> ApiResponse[None]:
        for index, instance in enumerate(self._instances):
            if instance.id != instance_id:
                continue
            update: dict[str, Any] = {"status": status, "last_heartbeat": utc_now()}
            if status in ("offline", "maintenance"):
                update.update(
                    usage=0,
                    memory=MemoryUsage(used=0, total=instance.memory.total),
                    user_id=None,
                    user_name=None,
                )
            self._instances[index] = instance.model_copy(update=update)
            _logger.info(event, instance_id=instance_id)
            return ApiResponse(code=SUCCESS_CODE, message=message, data=None)
        return ApiResponse(code=404, message="instance not found", data=None)

    async def restart_instance(self, instance_id: str) -> ApiResponse[None]:
        await self._delay()
        return self._transition(instance_id, "online", "instance_restarted", "instance restarted")

    async def start_instance(self, instance_id: str) -> ApiResponse[None]:
        await self._delay()
        return self._transition(instance_id, "online", "instance_started", "instance started")

    async def stop_instance(self, instance_id: str) -> ApiResponse[None]:
        """Take an instance offline, releasing its user and load."""
        await self._delay()
        return self._transition(instance_id, "offline", "instance_stopped", "instance stopped")

    async def maintenance_instance(self, instance_id: str) -> ApiResponse[None]:
        await self._delay()
        return self._transition(
            instance_id, "maintenance", "instance_maintenance", "instance in maintenance"
        )


__all__ = [
    "CreateUserData",
    "GPUInstance",
    "MemoryUsage",
    "MockInstanceProvider",
    "MockUserProvider",
    "UpdateUserData",
    "User",
]
