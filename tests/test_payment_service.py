"""Integration tests for trip payment registration and its share split."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest

from src.domain.distribution import DistributionError, calculate_distribution
from src.domain.enums import PaymentMethod, PaymentStatus
from src.domain.errors import (
    BusinessRuleError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from src.services.payments import PaymentService, normalize_payment_method
from src.services.trips import TripService
from tests.conftest import completed_trip, create_trip


async def pay(factory, trip_id, method="cash", passenger_id=None):
    async with factory() as session:
        payment = await PaymentService(session).create_payment_from_trip(
            trip_id, method, passenger_id
        )
        await session.commit()
        return payment


async def set_cost(factory, trip_id, cost):
    async with factory() as session:
        trip = await TripService(session).get_trip(trip_id)
        trip.cost = cost
        await session.commit()


class TestNormalizePaymentMethod:
    @pytest.mark.parametrize("raw", ["cash", " CASH ", "Cash"])
    def test_normalizes(self, raw):
        assert normalize_payment_method(raw) == PaymentMethod.CASH

    @pytest.mark.parametrize("raw", [None, "", "   ", 3])
    def test_required(self, raw):
        with pytest.raises(BusinessRuleError, match="The payment method is required"):
            normalize_payment_method(raw)

    def test_not_allowed(self):
        with pytest.raises(
            BusinessRuleError, match="Valid methods: cash, card, transfer"
        ):
            normalize_payment_method("bitcoin")


class TestCreatePayment:
    @pytest.mark.asyncio
    async def test_split_with_owner(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        await set_cost(session_factory, trip.id, Decimal("100000"))

        payment = await pay(session_factory, trip.id, " Card ", world.passenger)

        assert payment.amount == Decimal("100000")
        assert payment.payment_method == PaymentMethod.CARD
        assert payment.payment_status == PaymentStatus.COMPLETED
        assert payment.payment_date is not None
        assert payment.admin_share == Decimal("10000.00")
        assert payment.owner_share == Decimal("36000.00")
        assert payment.driver_share == Decimal("54000.00")

    @pytest.mark.asyncio
    async def test_split_without_owner(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.solo_driver, world.origin, world.far
        )
        payment = await pay(session_factory, trip.id, "transfer", world.passenger)

        expected = calculate_distribution(trip.cost, has_owner=False)
        assert payment.owner_share == Decimal("0.00")
        assert payment.admin_share == expected.admin_share
        assert payment.driver_share == expected.driver_share
        assert payment.admin_share + payment.driver_share == payment.amount

    @pytest.mark.asyncio
    async def test_single_payment_per_trip(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        await pay(session_factory, trip.id, "cash", world.passenger)

        with pytest.raises(BusinessRuleError, match="already has a registered payment"):
            await pay(session_factory, trip.id, "card", world.passenger)

    @pytest.mark.asyncio
    async def test_only_the_trip_passenger_pays(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        with pytest.raises(ForbiddenError, match="not yours"):
            await pay(session_factory, trip.id, "cash", world.other_passenger)

    @pytest.mark.asyncio
    async def test_trip_must_be_completed(self, session_factory, world):
        trip = await create_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        with pytest.raises(BusinessRuleError, match="only be registered for completed trips"):
            await pay(session_factory, trip.id, "cash", world.passenger)

    @pytest.mark.asyncio
    async def test_missing_trip(self, session_factory, world):
        with pytest.raises(NotFoundError, match="The trip does not exist"):
            await pay(session_factory, 999, "cash", world.passenger)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("trip_id", [0, -1, True])
    async def test_invalid_trip_id(self, session_factory, world, trip_id):
        with pytest.raises(BusinessRuleError, match=r"identifier \(trip_id\) is not valid"):
            await pay(session_factory, trip_id, "cash", world.passenger)

    @pytest.mark.asyncio
    async def test_method_checked_before_trip(self, session_factory, world):
        with pytest.raises(BusinessRuleError, match="not allowed"):
            await pay(session_factory, 999, "crypto", world.passenger)

    @pytest.mark.asyncio
    async def test_zero_cost_is_rejected(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        await set_cost(session_factory, trip.id, Decimal("0"))

        with pytest.raises(BusinessRuleError, match="The trip cost is not valid"):
            await pay(session_factory, trip.id, "cash", world.passenger)


class TestInternalErrors:
    @pytest.mark.asyncio
    async def test_unexpected_errors_are_wrapped(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        with patch(
            "src.services.payments.calculate_distribution",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(InternalError, match="Error registering trip payment") as info:
                await pay(session_factory, trip.id, "cash", world.passenger)

        assert isinstance(info.value.__cause__, RuntimeError)
        assert info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_distribution_errors_propagate(self, session_factory, world):
        trip = await completed_trip(
            session_factory, world.passenger, world.driver, world.origin, world.destination
        )
        with patch(
            "src.services.payments.calculate_distribution",
            side_effect=DistributionError("Error calculating the payment distribution"),
        ):
            with pytest.raises(DistributionError):
                await pay(session_factory, trip.id, "cash", world.passenger)

        # Nothing was stored, the trip can still be paid
        payment = await pay(session_factory, trip.id, "cash", world.passenger)
        assert payment.trip_id == trip.id
