"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``            -- passengers, drivers, owners and admins
* ``vehicles``         -- vehicles, optionally owned by an owner
* ``vehicle_drivers``  -- driver <-> vehicle assignments
* ``locations``        -- pickup / drop-off zones with coordinates
* ``trips``            -- one passenger transport request each
* ``payments``         -- at most one per trip, with the share split
* ``ratings``          -- at most one per (trip, author)

Money columns are ``Numeric(10, 2)`` and map to ``decimal.Decimal``.
Relationships default to ``lazy="raise"`` so every load is explicit in
the repositories (no implicit IO under asyncio).
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from src.domain.enums import (
    DriverStatus,
    PaymentMethod,
    PaymentStatus,
    RatingStatus,
    TripStatus,
    UserRole,
    VehicleStatus,
    VehicleType,
)

vehicle_drivers = Table(
    "vehicle_drivers",
    Base.metadata,
    Column("vehicle_id", Integer, ForeignKey("vehicles.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.PASSENGER, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    driver_status = Column(Enum(DriverStatus), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_users_role", "role"),
        Index("idx_users_driver_status", "driver_status"),
    )


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate = Column(String(20), unique=True, nullable=False)
    brand = Column(String(60), nullable=True)
    model = Column(String(60), nullable=True)
    vehicle_type = Column(Enum(VehicleType), nullable=True)
    status = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    drivers = relationship(UserModel, secondary=vehicle_drivers, lazy="raise")

    __table_args__ = (Index("idx_vehicles_owner", "owner_id"),)


class LocationModel(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    locality = Column(String(120), nullable=False)
    zone = Column(String(120), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    __table_args__ = (Index("idx_locations_locality", "locality"),)


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    passenger_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    origin_location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    destination_location_id = Column(
        Integer, ForeignKey("locations.id"), nullable=False
    )

    # Set once at creation, never updated
    distance_km = Column(Numeric(10, 2), nullable=True)
    cost = Column(Numeric(10, 2), nullable=False)

    status = Column(Enum(TripStatus), default=TripStatus.IN_PROGRESS, nullable=False)
    requested_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    passenger = relationship(UserModel, foreign_keys=[passenger_id], lazy="raise")
    driver = relationship(UserModel, foreign_keys=[driver_id], lazy="raise")
    vehicle = relationship(VehicleModel, lazy="raise")
    origin_location = relationship(
        LocationModel, foreign_keys=[origin_location_id], lazy="raise"
    )
    destination_location = relationship(
        LocationModel, foreign_keys=[destination_location_id], lazy="raise"
    )

    __table_args__ = (
        Index("idx_trips_status", "status"),
        Index("idx_trips_passenger", "passenger_id"),
        Index("idx_trips_driver", "driver_id"),
    )


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), unique=True, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    payment_status = Column(
        Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    payment_date = Column(DateTime(timezone=True), server_default=func.now())
    admin_share = Column(Numeric(10, 2), nullable=False)
    driver_share = Column(Numeric(10, 2), nullable=False)
    owner_share = Column(Numeric(10, 2), nullable=False)

    trip = relationship(TripModel, lazy="raise")

    __table_args__ = (
        Index("idx_payments_status", "payment_status"),
        Index("idx_payments_date", "payment_date"),
    )


class RatingModel(Base):
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    target_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    score = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    status = Column(Enum(RatingStatus), default=RatingStatus.NOT_RATED, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author = relationship(UserModel, foreign_keys=[author_id], lazy="raise")
    target = relationship(UserModel, foreign_keys=[target_id], lazy="raise")

    __table_args__ = (
        UniqueConstraint("trip_id", "author_id", name="uq_ratings_trip_author"),
        Index("idx_ratings_target", "target_id"),
    )
