"""
Trip endpoints
==============

GET   /api/v1/trips/locations             -- all localities and zones
GET   /api/v1/trips/locations/{locality}  -- zones of one locality
POST  /api/v1/trips                       -- request a trip (passenger)
GET   /api/v1/trips/{trip_id}             -- trip summary
PATCH /api/v1/trips/{trip_id}/complete    -- complete a trip
PATCH /api/v1/trips/{trip_id}/cancel      -- cancel a trip
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ERROR_RESPONSES,
    LocationResponse,
    TripCreateRequest,
    TripSummaryResponse,
    ZoneResponse,
)
from src.config import settings
from src.infrastructure.models import TripModel, UserModel
from src.services.trips import TripService

router = APIRouter(prefix="/trips", tags=["trips"], responses=ERROR_RESPONSES)


def format_cost(cost) -> str:
    return f"${cost:,.2f}"


def trip_summary(trip: TripModel) -> TripSummaryResponse:
    return TripSummaryResponse(
        id=trip.id,
        passenger_name=trip.passenger.name,
        driver_name=trip.driver.name,
        driver_status=trip.driver.driver_status,
        vehicle_plate=trip.vehicle.plate,
        origin_zone=trip.origin_location.zone,
        destination_zone=trip.destination_location.zone,
        distance_km=trip.distance_km,
        cost=trip.cost,
        formatted_cost=format_cost(trip.cost),
        status=trip.status,
        requested_at=trip.requested_at,
        completed_at=trip.completed_at,
        canceled_at=trip.canceled_at,
    )


@router.get(
    "/locations",
    response_model=list[LocationResponse],
    summary="Localities with each zone",
)
@limiter.limit(settings.rate_limit)
async def list_locations(request: Request, db: AsyncSession = Depends(get_db)):
    return await TripService(db).list_locations()


@router.get(
    "/locations/{locality}",
    response_model=list[ZoneResponse],
    summary="Zones of a locality",
)
@limiter.limit(settings.rate_limit)
async def list_zones(
    request: Request, locality: str, db: AsyncSession = Depends(get_db)
):
    return await TripService(db).list_zones(locality)


@router.post(
    "",
    status_code=201,
    response_model=TripSummaryResponse,
    summary="Request a trip",
    description=(
        "The acting user is the passenger.  The trip starts in_progress with "
        "the driver's first vehicle and the driver becomes busy."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_trip(
    request: Request,
    body: TripCreateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripService(db).create_trip(
        passenger_id=user.id,
        driver_id=body.driver_id,
        origin_location_id=body.origin_location_id,
        destination_location_id=body.destination_location_id,
    )
    return trip_summary(trip)


@router.get(
    "/{trip_id}",
    response_model=TripSummaryResponse,
    summary="Get a trip",
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return trip_summary(await TripService(db).get_trip(trip_id))


@router.patch(
    "/{trip_id}/complete",
    response_model=TripSummaryResponse,
    summary="Complete a trip",
    description="Transitions an in_progress or accepted trip to completed.",
)
@limiter.limit(settings.rate_limit)
async def complete_trip(
    request: Request,
    trip_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return trip_summary(await TripService(db).complete_trip(trip_id))


@router.patch(
    "/{trip_id}/cancel",
    response_model=TripSummaryResponse,
    summary="Cancel a trip",
    description="Completed and canceled trips cannot be canceled.",
)
@limiter.limit(settings.rate_limit)
async def cancel_trip(
    request: Request,
    trip_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return trip_summary(await TripService(db).cancel_trip(trip_id))
