"""
Rating rules and the low-rating deactivation policy.

* A rating is allowed only inside a window after the trip finished.
* The rated party is always "the other participant" of the trip.
* A user with ``block_count`` or more ratings below ``low_score`` is
  taken out of service: drivers go offline, everybody else is
  deactivated.  There is no grace period and no automatic reinstatement.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

LOW_RATING_SCORE = 3
LOW_RATING_BLOCK_COUNT = 5
MIN_SCORE, MAX_SCORE = 1, 5


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps coming back from the store as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def within_window(
    finished_at: datetime,
    window: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    now = as_utc(now or datetime.now(timezone.utc))
    return now - as_utc(finished_at) <= window


def valid_score(score: int) -> bool:
    return MIN_SCORE <= score <= MAX_SCORE


def rating_target_id(author_id: int, passenger_id: int, driver_id: int) -> int:
    """Drivers rate their passenger; passengers rate their driver."""
    return passenger_id if author_id == driver_id else driver_id


def should_block(
    low_rating_count: int, block_count: int = LOW_RATING_BLOCK_COUNT
) -> bool:
    return low_rating_count >= block_count


def average(scores: Iterable[Optional[int]]) -> float:
    """Arithmetic mean; unscored entries count as 0, no entries give 0."""
    values = [score or 0 for score in scores]
    if not values:
        return 0
    return sum(values) / len(values)
