"""Integration tests for earnings, passenger history and the admin summary."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio

from src.domain.enums import PaymentMethod, PaymentStatus
from src.domain.errors import BusinessRuleError, ForbiddenError
from src.services.earnings import EarningsService
from src.services.payments import PaymentService
from tests.conftest import completed_trip, get_user


@pytest_asyncio.fixture
async def paid(session_factory, world):
    """Two paid trips: one in the owned car, one on the owner-less moto."""
    payments = []
    for driver, destination, method in (
        (world.driver, world.destination, "cash"),
        (world.solo_driver, world.far, "card"),
    ):
        trip = await completed_trip(
            session_factory, world.passenger, driver, world.origin, destination
        )
        async with session_factory() as session:
            payments.append(
                await PaymentService(session).create_payment_from_trip(
                    trip.id, method, world.passenger
                )
            )
            await session.commit()
    return payments


async def earnings(factory, user_id, **filters):
    user = await get_user(factory, user_id)
    async with factory() as session:
        return await EarningsService(session).get_user_earnings(user, **filters)


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class TestUserEarnings:
    @pytest.mark.asyncio
    async def test_driver_sees_driver_share(self, session_factory, world, paid):
        result = await earnings(session_factory, world.driver)

        owned = paid[0]
        assert result["total"] == 1
        assert result["data"] == [
            {
                "trip_id": owned.trip_id,
                "amount": owned.driver_share,
                "payment_date": result["data"][0]["payment_date"],
                "payment_status": PaymentStatus.COMPLETED,
            }
        ]

    @pytest.mark.asyncio
    async def test_owner_sees_owner_share(self, session_factory, world, paid):
        result = await earnings(session_factory, world.owner)
        assert [item["amount"] for item in result["data"]] == [paid[0].owner_share]

    @pytest.mark.asyncio
    async def test_admin_sees_every_admin_share(self, session_factory, world, paid):
        result = await earnings(session_factory, world.admin)

        assert result["total"] == 2
        # newest first
        assert [item["trip_id"] for item in result["data"]] == [
            paid[1].trip_id,
            paid[0].trip_id,
        ]
        assert [item["amount"] for item in result["data"]] == [
            paid[1].admin_share,
            paid[0].admin_share,
        ]

    @pytest.mark.asyncio
    async def test_admin_can_narrow_by_driver_or_owner(self, session_factory, world, paid):
        by_driver = await earnings(session_factory, world.admin, driver_id=world.solo_driver)
        assert [i["trip_id"] for i in by_driver["data"]] == [paid[1].trip_id]

        by_owner = await earnings(session_factory, world.admin, owner_id=world.owner)
        assert [i["trip_id"] for i in by_owner["data"]] == [paid[0].trip_id]

    @pytest.mark.asyncio
    async def test_driver_filter_ignored_for_non_admins(self, session_factory, world, paid):
        result = await earnings(session_factory, world.driver, driver_id=world.solo_driver)
        assert [i["trip_id"] for i in result["data"]] == [paid[0].trip_id]

    @pytest.mark.asyncio
    async def test_passenger_is_forbidden(self, session_factory, world, paid):
        with pytest.raises(ForbiddenError):
            await earnings(session_factory, world.passenger)

    @pytest.mark.asyncio
    async def test_method_and_status_filters(self, session_factory, world, paid):
        cards = await earnings(
            session_factory, world.admin, payment_method=PaymentMethod.CARD
        )
        assert [i["trip_id"] for i in cards["data"]] == [paid[1].trip_id]

        failed = await earnings(
            session_factory, world.admin, payment_status=PaymentStatus.FAILED
        )
        assert failed["total"] == 0 and failed["data"] == []

    @pytest.mark.asyncio
    async def test_date_bounds_are_whole_days(self, session_factory, world, paid):
        same_day = await earnings(
            session_factory, world.admin, from_date=today(), to_date=today()
        )
        assert same_day["total"] == 2

        tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).date().isoformat()
        later = await earnings(session_factory, world.admin, from_date=tomorrow)
        assert later["total"] == 0

    @pytest.mark.asyncio
    async def test_bad_dates(self, session_factory, world, paid):
        with pytest.raises(BusinessRuleError, match="valid date format"):
            await earnings(session_factory, world.admin, from_date="2025-13-01")
        with pytest.raises(BusinessRuleError, match="cannot be greater"):
            await earnings(
                session_factory, world.admin, from_date="2025-02-01", to_date="2025-01-01"
            )

    @pytest.mark.asyncio
    async def test_pagination(self, session_factory, world, paid):
        first = await earnings(session_factory, world.admin, page=1, limit=1)
        second = await earnings(session_factory, world.admin, page=2, limit=1)

        assert (first["total"], first["page"], first["limit"]) == (2, 1, 1)
        assert first["data"][0]["trip_id"] == paid[1].trip_id
        assert second["data"][0]["trip_id"] == paid[0].trip_id

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, session_factory, world, paid):
        result = await earnings(session_factory, world.admin, page=0, limit=1000)
        assert (result["page"], result["limit"]) == (1, 50)


class TestPassengerHistory:
    @pytest.mark.asyncio
    async def test_history(self, session_factory, world, paid):
        user = await get_user(session_factory, world.passenger)
        async with session_factory() as session:
            result = await EarningsService(session).get_passenger_history(user)

        assert result["total"] == 2
        assert {p.trip_id for p in result["data"]} == {p.trip_id for p in paid}

    @pytest.mark.asyncio
    async def test_other_passenger_has_none(self, session_factory, world, paid):
        user = await get_user(session_factory, world.other_passenger)
        async with session_factory() as session:
            result = await EarningsService(session).get_passenger_history(user)
        assert result["total"] == 0

    @pytest.mark.asyncio
    async def test_only_passengers(self, session_factory, world):
        user = await get_user(session_factory, world.driver)
        async with session_factory() as session:
            with pytest.raises(ForbiddenError, match="Only passengers"):
                await EarningsService(session).get_passenger_history(user)


class TestAdminSummary:
    @pytest.mark.asyncio
    async def test_totals(self, session_factory, world, paid):
        admin = await get_user(session_factory, world.admin)
        async with session_factory() as session:
            summary = await EarningsService(session).get_admin_summary(admin)

        assert summary["total_payments"] == 2
        assert summary["total_amount"] == sum((p.amount for p in paid), Decimal("0"))
        assert summary["total_owner_share"] == paid[0].owner_share
        assert (
            summary["total_admin_share"]
            + summary["total_driver_share"]
            + summary["total_owner_share"]
            == summary["total_amount"]
        )
        assert len(summary["data"]) == 2

    @pytest.mark.asyncio
    async def test_date_names(self, session_factory, world):
        admin = await get_user(session_factory, world.admin)
        async with session_factory() as session:
            with pytest.raises(BusinessRuleError, match="startDate cannot be greater than endDate"):
                await EarningsService(session).get_admin_summary(
                    admin, "2025-02-01", "2025-01-01"
                )

    @pytest.mark.asyncio
    async def test_admin_only(self, session_factory, world):
        owner = await get_user(session_factory, world.owner)
        async with session_factory() as session:
            with pytest.raises(ForbiddenError):
                await EarningsService(session).get_admin_summary(owner)
