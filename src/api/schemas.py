"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.enums import (
    DriverStatus,
    PaymentMethod,
    PaymentStatus,
    RatingStatus,
    TripStatus,
)


# ── Requests ──────────────────────────────────────────────────────────


class TripCreateRequest(BaseModel):
    driver_id: int
    origin_location_id: int
    destination_location_id: int


class PaymentCreateRequest(BaseModel):
    trip_id: int
    payment_method: str = Field(
        ...,
        description="cash, card or transfer (case-insensitive).",
    )


class RatingCreateRequest(BaseModel):
    trip_id: int
    score: int = Field(..., ge=1, le=5)
    comments: Optional[str] = Field(None, max_length=1000)


# ── Responses ─────────────────────────────────────────────────────────


class LocationResponse(BaseModel):
    id: int
    locality: str
    zone: str
    latitude: float
    longitude: float

    model_config = {"from_attributes": True}


class ZoneResponse(BaseModel):
    id: int
    zone: str

    model_config = {"from_attributes": True}


class TripSummaryResponse(BaseModel):
    id: int
    passenger_name: str
    driver_name: str
    driver_status: Optional[DriverStatus] = None
    vehicle_plate: str
    origin_zone: str
    destination_zone: str
    distance_km: Decimal
    cost: Decimal
    formatted_cost: str
    status: TripStatus
    requested_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: int
    trip_id: int
    amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentDistributionResponse(PaymentResponse):
    admin_share: Decimal
    driver_share: Decimal
    owner_share: Decimal


class EarningsItem(BaseModel):
    trip_id: int
    amount: Decimal
    payment_date: Optional[datetime] = None
    payment_status: PaymentStatus


class EarningsPage(BaseModel):
    total: int
    page: int
    limit: int
    data: list[EarningsItem]


class PaymentHistoryPage(BaseModel):
    total: int
    page: int
    limit: int
    data: list[PaymentResponse]


class AdminSummaryResponse(BaseModel):
    total_payments: int
    total_amount: Decimal
    total_admin_share: Decimal
    total_driver_share: Decimal
    total_owner_share: Decimal
    data: list[PaymentDistributionResponse]


class RatingResponse(BaseModel):
    id: int
    trip_id: int
    author_id: int
    target_id: int
    score: Optional[int] = None
    comments: Optional[str] = None
    status: RatingStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RatingCreatedResponse(BaseModel):
    message: str = "Rating successfully submitted"
    rating: RatingResponse
    target_name: str


class MyRatingsResponse(BaseModel):
    total: int
    average: float
    ratings: list[RatingResponse]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


# Error bodies rendered by the domain error handler
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Business rule violated"},
    401: {"model": ErrorResponse, "description": "Missing or unknown user"},
    403: {"model": ErrorResponse, "description": "Action not allowed for this user"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}
