"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite), created fresh for each
test, so tests run without Docker / PostgreSQL.  ``seed_world`` inserts a
small fixed cast of users, vehicles and locations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.enums import DriverStatus, UserRole, VehicleType
from src.infrastructure.database import Base
from src.infrastructure.models import LocationModel, UserModel, VehicleModel
from src.services.trips import TripService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@dataclass
class World:
    admin: int
    owner: int
    passenger: int
    other_passenger: int
    inactive_passenger: int
    driver: int  # drives an owned vehicle
    solo_driver: int  # drives a vehicle without owner
    busy_driver: int
    carless_driver: int
    vehicle: int
    solo_vehicle: int
    origin: int
    destination: int
    far: int


async def seed_world(factory: async_sessionmaker) -> World:
    async with factory() as s:
        admin = UserModel(name="Ana Admin", email="admin@example.com", role=UserRole.ADMIN)
        owner = UserModel(name="Olga Owner", email="owner@example.com", role=UserRole.OWNER)
        passenger = UserModel(
            name="Paula Passenger", email="paula@example.com", role=UserRole.PASSENGER
        )
        other_passenger = UserModel(
            name="Pilar Passenger", email="pilar@example.com", role=UserRole.PASSENGER
        )
        inactive_passenger = UserModel(
            name="Irene Inactive",
            email="irene@example.com",
            role=UserRole.PASSENGER,
            active=False,
        )
        driver = UserModel(
            name="Lucia Driver",
            email="lucia@example.com",
            role=UserRole.DRIVER,
            driver_status=DriverStatus.AVAILABLE,
        )
        solo_driver = UserModel(
            name="Gabriela Driver",
            email="gabriela@example.com",
            role=UserRole.DRIVER,
            driver_status=DriverStatus.AVAILABLE,
        )
        busy_driver = UserModel(
            name="Fernanda Driver",
            email="fernanda@example.com",
            role=UserRole.DRIVER,
            driver_status=DriverStatus.BUSY,
        )
        carless_driver = UserModel(
            name="Juliana Driver",
            email="juliana@example.com",
            role=UserRole.DRIVER,
            driver_status=DriverStatus.AVAILABLE,
        )
        s.add_all(
            [
                admin,
                owner,
                passenger,
                other_passenger,
                inactive_passenger,
                driver,
                solo_driver,
                busy_driver,
                carless_driver,
            ]
        )
        await s.flush()

        vehicle = VehicleModel(
            plate="ABC123",
            brand="Renault",
            vehicle_type=VehicleType.CARRO,
            owner_id=owner.id,
            drivers=[driver],
        )
        solo_vehicle = VehicleModel(
            plate="XYZ789",
            brand="Yamaha",
            vehicle_type=VehicleType.MOTO,
            owner_id=None,
            drivers=[solo_driver],
        )
        busy_vehicle = VehicleModel(
            plate="BUS001", vehicle_type=VehicleType.CARRO, drivers=[busy_driver]
        )
        origin = LocationModel(
            locality="Usaquén", zone="Verbenal", latitude=4.7640, longitude=-74.0410
        )
        destination = LocationModel(
            locality="Chapinero", zone="Chicó", latitude=4.6486, longitude=-74.0628
        )
        far = LocationModel(
            locality="Suba", zone="Niza", latitude=4.7411, longitude=-74.0840
        )
        s.add_all([vehicle, solo_vehicle, busy_vehicle, origin, destination, far])
        await s.flush()

        world = World(
            admin=admin.id,
            owner=owner.id,
            passenger=passenger.id,
            other_passenger=other_passenger.id,
            inactive_passenger=inactive_passenger.id,
            driver=driver.id,
            solo_driver=solo_driver.id,
            busy_driver=busy_driver.id,
            carless_driver=carless_driver.id,
            vehicle=vehicle.id,
            solo_vehicle=solo_vehicle.id,
            origin=origin.id,
            destination=destination.id,
            far=far.id,
        )
        await s.commit()
        return world


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory database, then drop everything."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def world(session_factory) -> World:
    return await seed_world(session_factory)


# ── Helpers ───────────────────────────────────────────────────────────


async def get_user(factory: async_sessionmaker, user_id: int) -> UserModel:
    async with factory() as session:
        return await session.get(UserModel, user_id)


async def create_trip(
    factory: async_sessionmaker,
    passenger: int,
    driver: int,
    origin: int,
    destination: int,
):
    async with factory() as session:
        trip = await TripService(session).create_trip(
            passenger, driver, origin, destination
        )
        await session.commit()
        return trip


async def completed_trip(
    factory: async_sessionmaker,
    passenger: int,
    driver: int,
    origin: int,
    destination: int,
):
    trip = await create_trip(factory, passenger, driver, origin, destination)
    async with factory() as session:
        trip = await TripService(session).complete_trip(trip.id)
        await session.commit()
        return trip
