"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health               -- simple health check
GET /api/v1/admin/payments/summary     -- all payments with share totals
GET /api/v1/admin/ratings              -- every rating, newest first
GET /api/v1/admin/ratings/{rating_id}  -- one rating
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ERROR_RESPONSES,
    AdminSummaryResponse,
    HealthResponse,
    RatingResponse,
)
from src.config import settings
from src.domain.enums import UserRole
from src.domain.errors import ForbiddenError
from src.infrastructure.models import UserModel
from src.services.earnings import EarningsService
from src.services.ratings import RatingService

router = APIRouter(prefix="/admin", tags=["admin"], responses=ERROR_RESPONSES)


async def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if user.role != UserRole.ADMIN:
        raise ForbiddenError("Administrator role required")
    return user


@router.get(
    "/payments/summary",
    response_model=AdminSummaryResponse,
    summary="Summary of all payments and their distribution",
)
@limiter.limit(settings.rate_limit)
async def payments_summary(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EarningsService(db).get_admin_summary(user, start_date, end_date)


@router.get(
    "/ratings",
    response_model=list[RatingResponse],
    summary="List all ratings",
)
@limiter.limit(settings.rate_limit)
async def list_ratings(
    request: Request,
    user: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await RatingService(db).list_ratings()


@router.get(
    "/ratings/{rating_id}",
    response_model=RatingResponse,
    summary="Get a rating",
)
@limiter.limit(settings.rate_limit)
async def get_rating(
    request: Request,
    rating_id: int,
    user: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await RatingService(db).get_rating(rating_id)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
