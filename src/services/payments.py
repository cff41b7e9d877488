"""
Trip payments
=============

Registers the single payment of a completed trip and stores the
admin / driver / owner split computed by ``domain.distribution``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.distribution import calculate_distribution
from src.domain.enums import PaymentMethod, PaymentStatus, TripStatus
from src.domain.errors import (
    BusinessRuleError,
    DomainError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from src.infrastructure.models import PaymentModel
from src.infrastructure.repositories import PaymentRepository, TripRepository

logger = logging.getLogger(__name__)

ALLOWED_PAYMENT_METHODS = tuple(method.value for method in PaymentMethod)


def normalize_payment_method(value: object) -> PaymentMethod:
    if not value or not isinstance(value, str) or not value.strip():
        raise BusinessRuleError("The payment method is required")
    normalized = value.strip().lower()
    if normalized not in ALLOWED_PAYMENT_METHODS:
        raise BusinessRuleError(
            "Payment method not allowed. Valid methods: "
            + ", ".join(ALLOWED_PAYMENT_METHODS)
        )
    return PaymentMethod(normalized)


class PaymentService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.trips = TripRepository(session)
        self.payments = PaymentRepository(session)

    async def create_payment_from_trip(
        self, trip_id: int, payment_method: str, passenger_id: int
    ) -> PaymentModel:
        logger.info(
            "Attempting to register payment. trip_id=%s, user_id=%s",
            trip_id,
            passenger_id,
        )
        try:
            return await self._create_payment(trip_id, payment_method, passenger_id)
        except InternalError:
            logger.exception(
                "Internal error registering trip payment. trip_id=%s, user_id=%s",
                trip_id,
                passenger_id,
            )
            raise
        except DomainError as exc:
            logger.warning(
                "Payment for trip %s rejected: %s", trip_id, exc.message
            )
            raise
        except Exception as exc:
            logger.exception(
                "Error registering trip payment. trip_id=%s, user_id=%s",
                trip_id,
                passenger_id,
            )
            raise InternalError("Error registering trip payment") from exc

    async def _create_payment(
        self, trip_id: int, payment_method: str, passenger_id: int
    ) -> PaymentModel:
        if not isinstance(trip_id, int) or isinstance(trip_id, bool) or trip_id <= 0:
            raise BusinessRuleError("The trip identifier (trip_id) is not valid")

        method = normalize_payment_method(payment_method)

        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise NotFoundError("The trip does not exist")

        if trip.status != TripStatus.COMPLETED:
            raise BusinessRuleError(
                "Payments can only be registered for completed trips"
            )

        if await self.payments.get_by_trip(trip.id):
            raise BusinessRuleError("This trip already has a registered payment")

        if trip.passenger_id != passenger_id:
            raise ForbiddenError(
                "You cannot register a payment for a trip that is not yours"
            )

        try:
            amount = Decimal(str(trip.cost))
        except (InvalidOperation, TypeError):
            amount = None
        if amount is None or not amount.is_finite() or amount <= 0:
            raise BusinessRuleError("The trip cost is not valid")

        has_owner = trip.vehicle is not None and trip.vehicle.owner_id is not None
        distribution = calculate_distribution(
            amount,
            has_owner,
            owner_share_of_remaining=settings.owner_share_of_remaining,
            admin_rate=settings.admin_share_rate,
        )

        # Single INSERT inside the request transaction; the unique trip_id
        # constraint backs up the "no prior payment" check above.
        try:
            payment = await self.payments.create(
                PaymentModel(
                    trip_id=trip.id,
                    amount=amount,
                    payment_method=method,
                    payment_status=PaymentStatus.COMPLETED,
                    payment_date=datetime.now(timezone.utc),
                    admin_share=distribution.admin_share,
                    driver_share=distribution.driver_share,
                    owner_share=distribution.owner_share,
                )
            )
        except IntegrityError:
            raise BusinessRuleError(
                "This trip already has a registered payment"
            ) from None

        logger.info(
            "Payment %d registered for trip %d: admin=%s driver=%s owner=%s",
            payment.id,
            trip.id,
            distribution.admin_share,
            distribution.driver_share,
            distribution.owner_share,
        )
        return payment
