"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import (
    LocationModel,
    PaymentModel,
    RatingModel,
    TripModel,
    UserModel,
    VehicleModel,
    vehicle_drivers,
)
from src.domain.earnings import EarningsScope
from src.domain.enums import (
    ACTIVE_TRIP_STATUSES,
    DriverStatus,
    PaymentMethod,
    PaymentStatus,
    RatingStatus,
    TripStatus,
)

TRIP_SUMMARY_LOADS = (
    selectinload(TripModel.passenger),
    selectinload(TripModel.driver),
    selectinload(TripModel.vehicle),
    selectinload(TripModel.origin_location),
    selectinload(TripModel.destination_location),
)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def set_driver_status(
        self,
        driver_id: int,
        new_status: DriverStatus,
        expected: Iterable[DriverStatus],
    ) -> bool:
        """
        Guarded write of ``driver_status``.

        ``UPDATE users SET driver_status = new WHERE id = ? AND
        driver_status IN (expected)`` -- the row count tells the caller
        whether it won.  This is the only write path for the column.
        """
        result = await self.session.execute(
            update(UserModel)
            .where(
                UserModel.id == driver_id,
                UserModel.driver_status.in_(list(expected)),
            )
            .values(driver_status=new_status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        # Refresh the identity-map copy so callers see the new status
        await self.session.get(UserModel, driver_id, populate_existing=True)
        return True


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def first_for_driver(self, driver_id: int) -> Optional[VehicleModel]:
        result = await self.session.execute(
            select(VehicleModel)
            .join(vehicle_drivers, vehicle_drivers.c.vehicle_id == VehicleModel.id)
            .where(vehicle_drivers.c.user_id == driver_id)
            .order_by(VehicleModel.id)
            .limit(1)
        )
        return result.scalars().first()


class LocationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, location_id: int) -> Optional[LocationModel]:
        return await self.session.get(LocationModel, location_id)

    async def list_all(self) -> list[LocationModel]:
        result = await self.session.execute(
            select(LocationModel).order_by(LocationModel.id)
        )
        return list(result.scalars().all())

    async def list_by_locality(self, locality: str) -> list[LocationModel]:
        result = await self.session.execute(
            select(LocationModel)
            .where(LocationModel.locality == locality)
            .order_by(LocationModel.id)
        )
        return list(result.scalars().all())


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, trip: TripModel) -> TripModel:
        self.session.add(trip)
        await self.session.flush()
        return trip

    async def get_by_id(self, trip_id: int) -> Optional[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .options(*TRIP_SUMMARY_LOADS)
        )
        return result.scalar_one_or_none()

    async def transition(
        self,
        trip_id: int,
        new_status: TripStatus,
        expected: Iterable[TripStatus],
        **timestamps: datetime,
    ) -> bool:
        """
        Guarded write of ``status``, same contract as ``set_driver_status``.

        Only a trip still in one of the ``expected`` statuses moves; the
        caller learns from the return value whether it won.
        """
        result = await self.session.execute(
            update(TripModel)
            .where(
                TripModel.id == trip_id,
                TripModel.status.in_(list(expected)),
            )
            .values(status=new_status, **timestamps)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def refresh(self, trip_id: int) -> Optional[TripModel]:
        """Re-read a trip, overwriting the identity-map copy."""
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .options(*TRIP_SUMMARY_LOADS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_active_for_passenger(
        self, passenger_id: int
    ) -> Optional[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(
                TripModel.passenger_id == passenger_id,
                TripModel.status.in_(list(ACTIVE_TRIP_STATUSES)),
            )
            .limit(1)
        )
        return result.scalars().first()


class PaymentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: PaymentModel) -> PaymentModel:
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def get_by_trip(self, trip_id: int) -> Optional[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.trip_id == trip_id)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        scope: EarningsScope = EarningsScope.ALL,
        user_id: Optional[int] = None,
        passenger_id: Optional[int] = None,
        driver_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        payment_status: Optional[PaymentStatus] = None,
        payment_method: Optional[PaymentMethod] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[PaymentModel], int]:
        """
        Filtered payment listing, newest first.

        ``date_from`` is inclusive and ``date_to`` exclusive.  Returns the
        requested page and the total number of matching rows.
        """
        query = (
            select(PaymentModel)
            .join(TripModel, PaymentModel.trip_id == TripModel.id)
            .join(VehicleModel, TripModel.vehicle_id == VehicleModel.id)
        )

        if scope == EarningsScope.DRIVER:
            query = query.where(TripModel.driver_id == user_id)
        elif scope == EarningsScope.OWNER:
            query = query.where(VehicleModel.owner_id == user_id)

        if passenger_id is not None:
            query = query.where(TripModel.passenger_id == passenger_id)
        if driver_id is not None:
            query = query.where(TripModel.driver_id == driver_id)
        if owner_id is not None:
            query = query.where(VehicleModel.owner_id == owner_id)
        if date_from is not None:
            query = query.where(PaymentModel.payment_date >= date_from)
        if date_to is not None:
            query = query.where(PaymentModel.payment_date < date_to)
        if payment_status is not None:
            query = query.where(PaymentModel.payment_status == payment_status)
        if payment_method is not None:
            query = query.where(PaymentModel.payment_method == payment_method)

        total = await self.session.scalar(
            select(func.count()).select_from(query.subquery())
        )

        query = query.order_by(
            PaymentModel.payment_date.desc(), PaymentModel.id.desc()
        ).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total or 0


class RatingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, rating: RatingModel) -> RatingModel:
        self.session.add(rating)
        await self.session.flush()
        return rating

    async def get_by_id(self, rating_id: int) -> Optional[RatingModel]:
        result = await self.session.execute(
            select(RatingModel)
            .where(RatingModel.id == rating_id)
            .options(selectinload(RatingModel.author), selectinload(RatingModel.target))
        )
        return result.scalar_one_or_none()

    async def get_by_trip_and_author(
        self, trip_id: int, author_id: int
    ) -> Optional[RatingModel]:
        result = await self.session.execute(
            select(RatingModel).where(
                RatingModel.trip_id == trip_id,
                RatingModel.author_id == author_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[RatingModel]:
        result = await self.session.execute(
            select(RatingModel)
            .options(selectinload(RatingModel.author), selectinload(RatingModel.target))
            .order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
        )
        return list(result.scalars().all())

    async def list_received(self, user_id: int) -> list[RatingModel]:
        result = await self.session.execute(
            select(RatingModel)
            .where(
                RatingModel.target_id == user_id,
                RatingModel.status == RatingStatus.RATED,
            )
            .order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
        )
        return list(result.scalars().all())

    async def count_low_ratings(self, user_id: int, below: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(RatingModel)
            .where(RatingModel.target_id == user_id, RatingModel.score < below)
        )
        return result.scalar() or 0
