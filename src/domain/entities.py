"""
Domain entities and value objects.

Patterns used
-------------
- **State Pattern** on trips: ``assert_transition`` enforces the lifecycle
  table in ``enums.TRIP_TRANSITIONS``
  (PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED | CANCELED).
- ``Distribution`` is the immutable result of splitting a payment.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .enums import TRIP_TRANSITIONS, TripStatus


class InvalidStateTransition(Exception):
    """Raised when a trip status change violates the state machine."""

    def __init__(self, current: TripStatus, new: TripStatus):
        super().__init__(f"Cannot transition from {current.value} to {new.value}")
        self.current = current
        self.new = new


def assert_transition(current: TripStatus, new: TripStatus) -> TripStatus:
    """Return *new* if ``current -> new`` is legal, else raise."""
    if new not in TRIP_TRANSITIONS.get(current, set()):
        raise InvalidStateTransition(current, new)
    return new


def predecessors(new: TripStatus) -> list[TripStatus]:
    """Statuses from which a trip may move to *new*."""
    return [status for status, allowed in TRIP_TRANSITIONS.items() if new in allowed]


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Distribution:
    admin_share: Decimal
    driver_share: Decimal
    owner_share: Decimal

    @property
    def total(self) -> Decimal:
        return self.admin_share + self.driver_share + self.owner_share
