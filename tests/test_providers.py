"""Tests for the response envelope and mock providers."""

import pytest
from pydantic import ValidationError

from adminkit.core.errors import ApiError
from adminkit.operations import FormSubmission, PaginationCursor
from adminkit.providers import (
    ApiResponse,
    CreateUserData,
    MockInstanceProvider,
    MockOrderProvider,
    MockUserProvider,
    PageData,
    UpdateUserData,
    unwrap,
    unwrapping,
)


class TestEnvelope:
    def test_unwrap_success(self):
        assert unwrap(ApiResponse(code=200, message="success", data=[1, 2])) == [1, 2]

    def test_unwrap_mapping(self):
        assert unwrap({"code": 200, "message": "success", "data": {"id": "1"}}) == {"id": "1"}

    def test_unwrap_business_failure(self):
        with pytest.raises(ApiError) as exc_info:
            unwrap({"code": 403, "message": "forbidden", "data": {"role": "user"}})
        assert exc_info.value.code == 403
        assert exc_info.value.message == "forbidden"
        assert exc_info.value.data == {"role": "user"}

    def test_page_data_wire_aliases(self):
        page = PageData[int].model_validate({"list": [1, 2], "total": 2, "pageSize": 2})
        assert page.items == [1, 2]
        assert page.page_size == 2
        assert page.model_dump(by_alias=True)["list"] == [1, 2]

    @pytest.mark.asyncio
    async def test_unwrapping_decorator(self):
        @unwrapping
        async def fetch() -> ApiResponse[str]:
            return ApiResponse(code=200, data="payload")

        assert await fetch() == "payload"
        assert fetch.__name__ == "fetch"


class TestMockUserProvider:
    @pytest.mark.asyncio
    async def test_paging(self):
        provider = MockUserProvider(count=23, delay_ms=0)
        response = await provider.list_users(PaginationCursor(page=3, page_size=10))
        assert response.ok
        assert response.data.total == 23
        assert [u.id for u in response.data.items] == ["21", "22", "23"]

    @pytest.mark.asyncio
    async def test_filters(self):
        provider = MockUserProvider(count=50, delay_ms=0)
        cursor = PaginationCursor(page=1, page_size=100)

        admins = (await provider.list_users(cursor, role="admin")).data
        assert admins.items
        assert all(u.role == "admin" for u in admins.items)

        inactive = (await provider.list_users(cursor, status="inactive")).data
        assert all(u.status == "inactive" for u in inactive.items)

        found = (await provider.list_users(cursor, search="USER007")).data
        assert [u.username for u in found.items] == ["user007"]

    def test_seeded_generation_is_deterministic(self):
        first = MockUserProvider(count=20, seed=7, delay_ms=0).users
        second = MockUserProvider(count=20, seed=7, delay_ms=0).users
        assert first == second

    @pytest.mark.asyncio
    async def test_get_user(self):
        provider = MockUserProvider(count=5, delay_ms=0)
        assert (await provider.get_user("1")).data.username == "admin"

        missing = await provider.get_user("404")
        assert missing.code == 404
        assert missing.data is None

    @pytest.mark.asyncio
    async def test_create_user(self):
        provider = MockUserProvider(count=2, delay_ms=0)
        response = await provider.create_user(
            {"username": "ops", "email": "ops@example.com", "password": "pw", "role": "admin"}
        )
        assert response.data.id == "3"
        assert response.data.role == "admin"
        assert len(provider.users) == 3

    @pytest.mark.asyncio
    async def test_create_user_validation(self):
        provider = MockUserProvider(count=2, delay_ms=0)
        with pytest.raises(ValidationError):
            await provider.create_user({"username": "", "email": "x", "password": ""})

    def test_create_payload_model(self):
        assert CreateUserData(username="a", email="a@b.c", password="p").role == "user"

    @pytest.mark.asyncio
    async def test_update_user_changes_only_given_fields(self):
        provider = MockUserProvider(count=3, delay_ms=0)
        before = provider.users[1]
        response = await provider.update_user("2", {"role": "admin", "phone": "13900000000"})

        assert response.ok
        assert response.data.role == "admin"
        assert response.data.phone == "13900000000"
        assert response.data.email == before.email
        assert provider.users[1] == response.data

    @pytest.mark.asyncio
    async def test_update_user_unknown_id(self):
        provider = MockUserProvider(count=3, delay_ms=0)
        response = await provider.update_user("99", UpdateUserData(status="inactive"))
        assert response.code == 404
        assert response.message == "user not found"

    @pytest.mark.asyncio
    async def test_update_user_validation(self):
        provider = MockUserProvider(count=3, delay_ms=0)
        with pytest.raises(ValidationError):
            await provider.update_user("2", {"username": ""})

    @pytest.mark.asyncio
    async def test_delete_user(self):
        provider = MockUserProvider(count=3, delay_ms=0)
        assert (await provider.delete_user("2")).ok
        assert [u.id for u in provider.users] == ["1", "3"]
        assert (await provider.delete_user("2")).code == 404

    @pytest.mark.asyncio
    async def test_batch_delete_skips_unknown_ids(self):
        provider = MockUserProvider(count=5, delay_ms=0)
        response = await provider.batch_delete_users(["2", "4", "99"])
        assert response.ok
        assert response.message == "deleted 2 users"
        assert [u.id for u in provider.users] == ["1", "3", "5"]

    @pytest.mark.asyncio
    async def test_reset_password(self):
        provider = MockUserProvider(count=2, delay_ms=0)
        assert (await provider.reset_password("1")).ok
        assert (await provider.reset_password("9")).code == 404


class TestMockInstanceProvider:
    def test_rotating_types_and_memory(self):
        instances = MockInstanceProvider(count=8, delay_ms=0).instances
        assert [i.type for i in instances[:4]] == ["RTX3080", "RTX3090", "RTX4090", "A100"]
        assert instances[3].memory.total == 80
        assert instances[0].name == "GPU-Server-001"

    def test_idle_instances_report_no_usage(self):
        for instance in MockInstanceProvider(count=20, delay_ms=0).instances:
            if instance.status in ("offline", "maintenance"):
                assert instance.usage == 0
                assert instance.memory.used == 0
            if instance.status == "using":
                assert instance.user_id is not None

    @pytest.mark.asyncio
    async def test_filters(self):
        provider = MockInstanceProvider(count=20, delay_ms=0)
        cursor = PaginationCursor(page=1, page_size=50)

        a100 = (await provider.list_instances(cursor, type="A100")).data
        assert a100.total == 5
        assert all(i.type == "A100" for i in a100.items)

        online = (await provider.list_instances(cursor, status="online")).data
        assert all(i.status == "online" for i in online.items)

        named = (await provider.list_instances(cursor, search="server-012")).data
        assert [i.id for i in named.items] == ["12"]

    @pytest.mark.asyncio
    async def test_restart_instance(self):
        provider = MockInstanceProvider(count=4, delay_ms=0)
        response = await provider.restart_instance("2")
        assert response.ok
        assert provider.instances[1].status == "online"

        missing = await provider.restart_instance("99")
        assert missing.code == 404

    @pytest.mark.asyncio
    async def test_stop_releases_user_and_load(self):
        provider = MockInstanceProvider(count=4, delay_ms=0)
        assert provider.instances[2].status == "using"

        response = await provider.stop_instance("3")
        stopped = provider.instances[2]
        assert response.ok
        assert stopped.status == "offline"
        assert stopped.usage == 0
        assert stopped.memory.used == 0
        assert stopped.memory.total == 24
        assert stopped.user_id is None

    @pytest.mark.asyncio
    async def test_start_and_maintenance(self):
        provider = MockInstanceProvider(count=4, delay_ms=0)
        assert (await provider.start_instance("2")).ok
        assert provider.instances[1].status == "online"

        assert (await provider.maintenance_instance("1")).message == "instance in maintenance"
        assert provider.instances[0].status == "maintenance"
        assert provider.instances[0].usage == 0

        assert (await provider.stop_instance("99")).code == 404


class TestMockOrderProvider:
    @pytest.mark.asyncio
    async def test_newest_first(self):
        provider = MockOrderProvider(count=30, delay_ms=0)
        page = (await provider.list_orders(PaginationCursor(page=1, page_size=30))).data
        created = [o.created_at for o in page.items]
        assert page.total == 30
        assert created == sorted(created, reverse=True)

    @pytest.mark.asyncio
    async def test_filters(self):
        provider = MockOrderProvider(count=40, delay_ms=0)
        cursor = PaginationCursor(page=1, page_size=100)

        paid = (await provider.list_orders(cursor, status="paid")).data
        assert paid.total == 10
        assert all(o.status == "paid" and o.paid_at is not None for o in paid.items)

        user_id = provider.orders[0].user_id
        mine = (await provider.list_orders(cursor, user_id=user_id)).data
        assert mine.items
        assert all(o.user_id == user_id for o in mine.items)

        a100 = (await provider.list_orders(cursor, search="gpu-a100")).data
        assert a100.items
        assert all(o.instance_name.startswith("GPU-A100-") for o in a100.items)

    def test_amount_follows_hourly_rate(self):
        for order in MockOrderProvider(count=8, delay_ms=0).orders:
            if order.instance_name.startswith("GPU-A100-"):
                assert order.amount == order.duration * 50

    @pytest.mark.asyncio
    async def test_pay_then_refund(self):
        provider = MockOrderProvider(count=4, delay_ms=0)

        paid = unwrap(await provider.pay_order("1"))
        assert paid.status == "paid"
        assert paid.paid_at is not None

        refunded = unwrap(await provider.refund_order("1"))
        assert refunded.status == "refunded"
        assert refunded.refunded_at is not None

    @pytest.mark.asyncio
    async def test_cancel_pending_order(self):
        provider = MockOrderProvider(count=4, delay_ms=0)
        response = await provider.cancel_order("1")
        assert response.message == "order cancelled"
        assert [o.status for o in provider.orders if o.id == "1"] == ["cancelled"]

    @pytest.mark.asyncio
    async def test_transition_from_wrong_state_conflicts(self):
        provider = MockOrderProvider(count=4, delay_ms=0)
        with pytest.raises(ApiError) as exc_info:
            unwrap(await provider.refund_order("1"))
        assert exc_info.value.code == 409
        assert exc_info.value.message == "order is pending, expected paid"

        assert (await provider.pay_order("404")).code == 404

    @pytest.mark.asyncio
    async def test_stats(self):
        provider = MockOrderProvider(count=20, delay_ms=0)
        await provider.pay_order("1")
        stats = unwrap(await provider.order_stats())
        paid = [o for o in provider.orders if o.status == "paid"]

        assert stats.total_orders == 20
        assert stats.paid_orders == 6
        assert stats.pending_orders == 4
        assert stats.total_revenue == sum(o.amount for o in paid)

    @pytest.mark.asyncio
    async def test_form_submission_reports_conflict(self, reporter, notifier):
        provider = MockOrderProvider(count=4, delay_ms=0)
        form = FormSubmission(unwrapping(provider.pay_order), success_message="order paid")

        assert (await form.submit("1")).status == "paid"
        assert notifier.texts("info") == ["order paid"]

        with pytest.raises(ApiError):
            await form.submit("1")
        assert form.error is not None
        assert form.error.code == 409
        assert len(notifier.texts("error")) == 1
