"""
Payment endpoints
=================

POST /api/v1/payments           -- register the payment of a completed trip
GET  /api/v1/payments/history   -- the passenger's own payments
GET  /api/v1/payments/earnings  -- role-scoped earnings per trip
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ERROR_RESPONSES,
    EarningsPage,
    PaymentCreateRequest,
    PaymentHistoryPage,
    PaymentResponse,
)
from src.config import settings
from src.domain.enums import PaymentMethod, PaymentStatus
from src.infrastructure.models import UserModel
from src.services.earnings import EarningsService
from src.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"], responses=ERROR_RESPONSES)


@router.post(
    "",
    status_code=201,
    response_model=PaymentResponse,
    summary="Register a trip payment",
    description=(
        "Only the trip's passenger can pay, only once, and only after the "
        "trip is completed.  The amount is split 10 % admin, then 40/60 "
        "owner/driver of the rest (driver takes all of it without an owner)."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_payment(
    request: Request,
    body: PaymentCreateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PaymentService(db).create_payment_from_trip(
        trip_id=body.trip_id,
        payment_method=body.payment_method,
        passenger_id=user.id,
    )


@router.get(
    "/history",
    response_model=PaymentHistoryPage,
    summary="Passenger payment history",
)
@limiter.limit(settings.rate_limit)
async def payment_history(
    request: Request,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EarningsService(db).get_passenger_history(user, page, limit)


@router.get(
    "/earnings",
    response_model=EarningsPage,
    summary="Earnings per trip for drivers, owners and admins",
)
@limiter.limit(settings.rate_limit)
async def earnings(
    request: Request,
    from_date: Optional[str] = Query(None, alias="fromDate", examples=["2025-01-01"]),
    to_date: Optional[str] = Query(None, alias="toDate", examples=["2025-12-31"]),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    payment_method: Optional[PaymentMethod] = Query(None, alias="paymentMethod"),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    driver_id: Optional[int] = Query(None, alias="driverId"),
    owner_id: Optional[int] = Query(None, alias="ownerId"),
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EarningsService(db).get_user_earnings(
        user,
        from_date=from_date,
        to_date=to_date,
        payment_status=payment_status,
        payment_method=payment_method,
        page=page,
        limit=limit,
        driver_id=driver_id,
        owner_id=owner_id,
    )
