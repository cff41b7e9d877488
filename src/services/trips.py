"""
Trip lifecycle service
======================

create  : validate -> claim driver (available -> busy) -> price -> insert
complete: in_progress | accepted -> completed, driver busy -> available
cancel  : pending | accepted | in_progress -> canceled, driver busy -> available

All writes of one operation go through the request's ``AsyncSession`` and
are committed (or rolled back) together by ``get_db``.  The driver claim and
the trip status change are guarded updates, so two concurrent requests for
the same driver or the same trip cannot both win, and only the request that
finished the trip releases its driver.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.entities import (
    InvalidStateTransition,
    Location,
    assert_transition,
    predecessors,
)
from src.domain.enums import DriverStatus, TripStatus, UserRole
from src.domain.errors import BusinessRuleError, NotFoundError
from src.domain.pricing import FareCalculator, PerKmPricing
from src.infrastructure.models import LocationModel, TripModel, UserModel
from src.infrastructure.repositories import (
    LocationRepository,
    TripRepository,
    UserRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)


def _check_user(
    user: UserModel | None, role: UserRole, label: str
) -> UserModel:
    if user is None:
        raise NotFoundError(f"{label} not found")
    if not user.active:
        raise BusinessRuleError(f"The {label.lower()} account is inactive")
    if user.role != role:
        raise BusinessRuleError(f"The user is not a {role.value}")
    return user


class TripService:
    def __init__(
        self, session: AsyncSession, calculator: FareCalculator | None = None
    ):
        self.session = session
        self.users = UserRepository(session)
        self.vehicles = VehicleRepository(session)
        self.locations = LocationRepository(session)
        self.trips = TripRepository(session)
        self.calculator = calculator or FareCalculator(
            PerKmPricing(settings.price_per_km)
        )

    # ── Reads ────────────────────────────────────────────────────────

    async def get_trip(self, trip_id: int) -> TripModel:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise NotFoundError("Trip not found")
        return trip

    async def list_locations(self) -> list[LocationModel]:
        return await self.locations.list_all()

    async def list_zones(self, locality: str) -> list[LocationModel]:
        zones = await self.locations.list_by_locality(locality.strip())
        if not zones:
            raise NotFoundError("Location not found")
        return zones

    # ── Lifecycle ────────────────────────────────────────────────────

    async def create_trip(
        self,
        passenger_id: int,
        driver_id: int,
        origin_location_id: int,
        destination_location_id: int,
    ) -> TripModel:
        logger.info(
            "Trip requested: passenger=%s driver=%s origin=%s destination=%s",
            passenger_id,
            driver_id,
            origin_location_id,
            destination_location_id,
        )

        # 1. Passenger
        passenger = _check_user(
            await self.users.get_by_id(passenger_id), UserRole.PASSENGER, "Passenger"
        )

        # 2. Driver
        driver = _check_user(
            await self.users.get_by_id(driver_id), UserRole.DRIVER, "Driver"
        )
        if driver.driver_status != DriverStatus.AVAILABLE:
            raise BusinessRuleError("The driver is not available")
        vehicle = await self.vehicles.first_for_driver(driver.id)
        if vehicle is None:
            raise BusinessRuleError("The driver has no assigned vehicle")

        # 3. Locations
        origin = await self.locations.get_by_id(origin_location_id)
        if origin is None:
            raise NotFoundError("Origin location not found")
        destination = await self.locations.get_by_id(destination_location_id)
        if destination is None:
            raise NotFoundError("Destination location not found")
        if origin.id == destination.id:
            raise BusinessRuleError("Origin and destination must be different")

        # 4. One active trip per passenger
        if await self.trips.get_active_for_passenger(passenger.id):
            raise BusinessRuleError("The passenger already has an active trip")

        # Claim the driver before writing the trip; losing the race aborts.
        claimed = await self.users.set_driver_status(
            driver.id, DriverStatus.BUSY, expected=[DriverStatus.AVAILABLE]
        )
        if not claimed:
            logger.warning("Driver %s was taken by a concurrent request", driver.id)
            raise BusinessRuleError("The driver is not available")

        distance_km, cost = self.calculator.quote(
            Location(origin.latitude, origin.longitude),
            Location(destination.latitude, destination.longitude),
        )

        trip = await self.trips.create(
            TripModel(
                passenger=passenger,
                driver=driver,
                vehicle=vehicle,
                origin_location=origin,
                destination_location=destination,
                distance_km=distance_km,
                cost=cost,
                status=TripStatus.IN_PROGRESS,
                requested_at=datetime.now(timezone.utc),
            )
        )
        logger.info(
            "Trip %d created: %s km, cost %s, driver %d busy",
            trip.id,
            distance_km,
            cost,
            driver.id,
        )
        return trip

    async def complete_trip(self, trip_id: int) -> TripModel:
        trip = await self._finish(
            trip_id, TripStatus.COMPLETED, completed_at=datetime.now(timezone.utc)
        )
        logger.info("Trip %d completed", trip.id)
        return trip

    async def cancel_trip(self, trip_id: int) -> TripModel:
        trip = await self._finish(
            trip_id, TripStatus.CANCELED, canceled_at=datetime.now(timezone.utc)
        )
        logger.info("Trip %d canceled", trip.id)
        return trip

    # ── Internals ────────────────────────────────────────────────────

    async def _finish(
        self, trip_id: int, new_status: TripStatus, **timestamps: datetime
    ) -> TripModel:
        trip = await self.get_trip(trip_id)
        self._check_transition(trip, new_status)

        # Guarded write: a request holding a stale status cannot move a trip
        # that another request already finished.
        moved = await self.trips.transition(
            trip.id, new_status, expected=predecessors(new_status), **timestamps
        )
        trip = await self.trips.refresh(trip.id)
        if not moved:
            logger.warning(
                "Trip %d changed concurrently, now %s", trip.id, trip.status.value
            )
            self._check_transition(trip, new_status)
            raise BusinessRuleError("The trip status changed, please retry")

        # Only the winner of the trip update frees the driver it held.
        await self._release_driver(trip)
        await self.session.flush()
        return trip

    @staticmethod
    def _check_transition(trip: TripModel, new_status: TripStatus) -> None:
        current = TripStatus(trip.status)
        if current == TripStatus.CANCELED:
            raise BusinessRuleError("The trip is already canceled")
        if current == TripStatus.COMPLETED:
            raise BusinessRuleError("The trip is already completed")
        try:
            assert_transition(current, new_status)
        except InvalidStateTransition:
            logger.warning(
                "Trip %d: rejected %s -> %s", trip.id, current.value, new_status.value
            )
            raise BusinessRuleError(
                "Only trips in progress or accepted can be completed"
                if new_status == TripStatus.COMPLETED
                else f"A trip in status {current.value} cannot be {new_status.value}"
            ) from None

    async def _release_driver(self, trip: TripModel) -> None:
        released = await self.users.set_driver_status(
            trip.driver_id, DriverStatus.AVAILABLE, expected=[DriverStatus.BUSY]
        )
        if not released:
            # Someone else moved the driver (e.g. taken offline); keep that.
            logger.warning(
                "Trip %d: driver %d was not busy, status left unchanged",
                trip.id,
                trip.driver_id,
            )
