"""Mock order endpoints.

Orders move through ``pending -> paid -> refunded`` or
``pending -> cancelled``. A transition from any other state answers with
a 409 envelope, which ``unwrap`` turns into an ApiError.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any, Literal

from pydantic import BaseModel, Field

from adminkit.core.constants import MOCK_PROVIDER_DELAY_MS, SUCCESS_CODE
from adminkit.core.logging import get_logger
from adminkit.operations.paginated import PaginationCursor
from adminkit.utils.time import utc_now

from .envelope import ApiResponse, PageData
from .mock import INSTANCE_TYPES, MOCK_EPOCH, MockProviderBase, paginate

_logger = get_logger("providers.orders")

OrderStatus = Literal["pending", "paid", "cancelled", "refunded"]

ORDER_STATUSES: tuple[OrderStatus, ...] = ("pending", "paid", "cancelled", "refunded")
HOURLY_RATE: dict[str, int] = {"RTX3080": 8, "RTX3090": 12, "RTX4090": 20, "A100": 50}
DURATIONS_HOURS = (1, 2, 4, 8, 12, 24)


class Order(BaseModel):
    id: str
    user_id: str
    user_name: str
    instance_id: str
    instance_name: str
    amount: int = Field(ge=0)
    status: OrderStatus
    duration: int = Field(gt=0, description="Rental length in hours")
    created_at: datetime
    paid_at: datetime | None = None
    refunded_at: datetime | None = None


class OrderStats(BaseModel):
    total_orders: int
    total_revenue: int
    pending_orders: int
    paid_orders: int


class MockOrderProvider(MockProviderBase):
    """Order endpoints backed by a seeded in-memory list, newest first.

    Args:
        count: Number of orders to generate.
        seed: Random seed; equal seeds produce equal data.
        delay_ms: Simulated latency per call.
    """

    def __init__(
        self,
        count: int = 200,
        *,
        seed: int = 0,
        delay_ms: float = MOCK_PROVIDER_DELAY_MS,
    ) -> None:
        super().__init__(delay_ms=delay_ms)
        rng = random.Random(seed)
        orders = [self._generate(i, rng) for i in range(1, count + 1)]
        self._orders = sorted(orders, key=lambda o: o.created_at, reverse=True)

    @staticmethod
    def _generate(index: int, rng: random.Random) -> Order:
        status = ORDER_STATUSES[(index - 1) % len(ORDER_STATUSES)]
        kind = INSTANCE_TYPES[(index - 1) % len(INSTANCE_TYPES)]
        duration = rng.choice(DURATIONS_HOURS)
        created = MOCK_EPOCH + timedelta(
            days=rng.randint(0, 29), hours=rng.randint(0, 23), minutes=rng.randint(0, 59)
        )
        paid = created + timedelta(seconds=rng.randint(0, 3600))
        user = rng.randint(1, 20)
        return Order(
            id=str(index),
            user_id=f"user{user}",
            user_name=f"User {user}",
            instance_id=f"instance{rng.randint(1, 50)}",
            instance_name=f"GPU-{kind}-{rng.randint(1, 10)}",
            amount=duration * HOURLY_RATE[kind],
            status=status,
            duration=duration,
            created_at=created,
            paid_at=paid if status in ("paid", "refunded") else None,
            refunded_at=paid + timedelta(seconds=rng.randint(0, 3600))
            if status == "refunded" else None,
        )

    @property
    def orders(self) -> list[Order]:
        return list(self._orders)

    async def list_orders(
        self,
        cursor: PaginationCursor,
        search: str | None = None,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> ApiResponse[PageData[Order]]:
        await self._delay()
        matches = self._orders
        if search:
            needle = search.lower()
            matches = [
                o for o in matches
                if needle in o.id.lower()
                or needle in o.user_name.lower()
                or needle in o.instance_name.lower()
            ]
        if status:
            matches = [o for o in matches if o.status == status]
        if user_id:
            matches = [o for o in matches if o.user_id == user_id]
        _logger.debug("list_orders", page=cursor.page, matched=len(matches))
        return ApiResponse(code=SUCCESS_CODE, message="success", data=paginate(matches, cursor))

    def _transition(
        self,
        order_id: str,
        allowed_from: OrderStatus,
        update: dict[str, Any],
        event: str,
    ) -> ApiResponse[Order]:
        for index, order in enumerate(self._orders):
            if order.id != order_id:
                continue
            if order.status != allowed_from:
                return ApiResponse(
                    code=409,
                    message=f"order is {order.status}, expected {allowed_from}",
                    data=None,
                )
            changed = order.model_copy(update=update)
            self._orders[index] = changed
            _logger.info(event, order_id=order_id)
            return ApiResponse(code=SUCCESS_CODE, message=f"order {changed.status}", data=changed)
        return ApiResponse(code=404, message="order not found", data=None)

    async def pay_order(self, order_id: str) -> ApiResponse[Order]:
        await self._delay()
        return self._transition(
            order_id, "pending", {"status": "paid", "paid_at": utc_now()}, "order_paid"
        )

    async def cancel_order(self, order_id: str) -> ApiResponse[Order]:
        await self._delay()
        return self._transition(order_id, "pending", {"status": "cancelled"}, "order_cancelled")

    async def refund_order(self, order_id: str) -> ApiResponse[Order]:
        await self._delay()
        return self._transition(
            order_id, "paid", {"status": "refunded", "refunded_at": utc_now()}, "order_refunded"
        )

    async def order_stats(self) -> ApiResponse[OrderStats]:
        """Order counts, with revenue summed over paid orders."""
        await self._delay()
        paid = [o for o in self._orders if o.status == "paid"]
        stats = OrderStats(
            total_orders=len(self._orders),
            total_revenue=sum(o.amount for o in paid),
            pending_orders=sum(1 for o in self._orders if o.status == "pending"),
            paid_orders=len(paid),
        )
        return ApiResponse(code=SUCCESS_CODE, message="success", data=stats)


__all__ = ["MockOrderProvider", "Order", "OrderStats", "OrderStatus"]
