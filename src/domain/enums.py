"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


# State machine: maps current status -> set of valid next statuses.
# New trips start directly in IN_PROGRESS; PENDING/ACCEPTED are kept for a
# separate accept step that the creation path does not use yet.
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PENDING: {TripStatus.ACCEPTED, TripStatus.CANCELED},
    TripStatus.ACCEPTED: {
        TripStatus.IN_PROGRESS,
        TripStatus.COMPLETED,
        TripStatus.CANCELED,
    },
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED, TripStatus.CANCELED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELED: set(),
}

ACTIVE_TRIP_STATUSES = frozenset(
    {TripStatus.PENDING, TripStatus.ACCEPTED, TripStatus.IN_PROGRESS}
)

TERMINAL_TRIP_STATUSES = frozenset(
    status for status, allowed in TRIP_TRANSITIONS.items() if not allowed
)


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    OWNER = "owner"
    DRIVER = "driver"
    PASSENGER = "passenger"


class DriverStatus(str, enum.Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class VehicleType(str, enum.Enum):
    CARRO = "carro"
    MOTO = "moto"


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class RatingStatus(str, enum.Enum):
    RATED = "rated"
    NOT_RATED = "notRated"
