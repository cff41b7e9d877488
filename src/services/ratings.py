"""
Trip ratings and the low-rating deactivation policy.

Flow of ``create_rating``::

    trip exists -> trip completed -> author took part -> score in range
        -> not rated yet -> inside rating window -> store -> block_user(target)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain import rating_policy
from src.domain.enums import DriverStatus, RatingStatus, TripStatus, UserRole
from src.domain.errors import BusinessRuleError, ForbiddenError, NotFoundError
from src.infrastructure.models import RatingModel, TripModel, UserModel
from src.infrastructure.repositories import (
    RatingRepository,
    TripRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

PARTICIPANT_ROLES = (UserRole.DRIVER, UserRole.PASSENGER)


class RatingService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ratings = RatingRepository(session)
        self.trips = TripRepository(session)
        self.users = UserRepository(session)
        self.window = timedelta(hours=settings.rating_window_hours)

    # ── Validation steps ─────────────────────────────────────────────

    async def _rateable_trip(self, trip_id: int) -> TripModel:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            logger.warning("Trip %s not found", trip_id)
            raise NotFoundError("Trip not found")
        if trip.status != TripStatus.COMPLETED:
            logger.warning("Trip %d not rateable. Status: %s", trip.id, trip.status)
            raise BusinessRuleError("Only completed trips can be rated")
        return trip

    @staticmethod
    def _check_participant(author: UserModel, trip: TripModel) -> None:
        if author.role not in PARTICIPANT_ROLES:
            raise ForbiddenError("Only drivers and passengers can rate trips")
        if author.id not in (trip.driver_id, trip.passenger_id):
            logger.warning("User %d is not part of trip %d", author.id, trip.id)
            raise ForbiddenError("You are not a participant of this trip")

    def _check_window(self, trip: TripModel, now: Optional[datetime]) -> None:
        finished_at = trip.completed_at or trip.requested_at
        if not rating_policy.within_window(finished_at, self.window, now):
            logger.warning("Trip %d exceeded the rating window", trip.id)
            raise BusinessRuleError(
                "You cannot rate this trip anymore. Rating window expired "
                f"({settings.rating_window_hours}h)"
            )

    # ── Operations ───────────────────────────────────────────────────

    async def create_rating(
        self,
        trip_id: int,
        score: int,
        comments: Optional[str],
        author: UserModel,
        now: Optional[datetime] = None,
    ) -> RatingModel:
        logger.debug("User %d creating rating for trip %s", author.id, trip_id)

        trip = await self._rateable_trip(trip_id)
        self._check_participant(author, trip)

        if not rating_policy.valid_score(score):
            raise BusinessRuleError("The score must be between 1 and 5")

        if await self.ratings.get_by_trip_and_author(trip.id, author.id):
            logger.warning("User %d already rated trip %d", author.id, trip.id)
            raise BusinessRuleError("You already rated this trip")

        self._check_window(trip, now)

        target_id = rating_policy.rating_target_id(
            author.id, trip.passenger_id, trip.driver_id
        )
        target = trip.passenger if target_id == trip.passenger_id else trip.driver

        rating = await self.ratings.create(
            RatingModel(
                trip_id=trip.id,
                author=author,
                target=target,
                score=score,
                comments=comments,
                status=RatingStatus.RATED,
                created_at=now or datetime.now(timezone.utc),
            )
        )
        logger.info(
            "Rating %d created by user %d for user %d", rating.id, author.id, target.id
        )

        await self.block_user(target)
        return rating

    async def block_user(self, target: UserModel) -> bool:
        """Take *target* out of service once low ratings pile up."""
        low = await self.ratings.count_low_ratings(
            target.id, below=settings.low_rating_score
        )
        logger.debug("User %d has %d low ratings", target.id, low)

        if not rating_policy.should_block(low, settings.low_rating_block_count):
            return False

        logger.warning("User %d reached low rating threshold, blocking", target.id)
        if target.role == UserRole.DRIVER:
            await self.users.set_driver_status(
                target.id,
                DriverStatus.OFFLINE,
                expected=[DriverStatus.AVAILABLE, DriverStatus.BUSY],
            )
        else:
            target.active = False
        await self.session.flush()
        return True

    async def calculate_user_average(self, user_id: int) -> float:
        ratings = await self.ratings.list_received(user_id)
        result = rating_policy.average(r.score for r in ratings)
        logger.debug("User %d average score: %.2f", user_id, result)
        return result

    async def get_my_ratings(self, user: UserModel) -> dict:
        if user.role not in PARTICIPANT_ROLES:
            raise ForbiddenError("Only drivers and passengers can view ratings")

        ratings = await self.ratings.list_received(user.id)
        return {
            "total": len(ratings),
            "average": rating_policy.average(r.score for r in ratings),
            "ratings": ratings,
        }

    async def list_ratings(self) -> list[RatingModel]:
        return await self.ratings.list_all()

    async def get_rating(self, rating_id: int) -> RatingModel:
        rating = await self.ratings.get_by_id(rating_id)
        if rating is None:
            raise NotFoundError("Rating not found")
        return rating
