"""
Rating endpoints
================

POST /api/v1/ratings     -- rate the other participant of a completed trip
GET  /api/v1/ratings/me  -- ratings received and their average
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ERROR_RESPONSES,
    MyRatingsResponse,
    RatingCreatedResponse,
    RatingCreateRequest,
    RatingResponse,
)
from src.config import settings
from src.infrastructure.models import UserModel
from src.services.ratings import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"], responses=ERROR_RESPONSES)


@router.post(
    "",
    status_code=201,
    response_model=RatingCreatedResponse,
    summary="Submit a rating",
)
@limiter.limit(settings.rate_limit)
async def create_rating(
    request: Request,
    body: RatingCreateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rating = await RatingService(db).create_rating(
        trip_id=body.trip_id,
        score=body.score,
        comments=body.comments,
        author=user,
    )
    return RatingCreatedResponse(
        rating=RatingResponse.model_validate(rating),
        target_name=rating.target.name,
    )


@router.get("/me", response_model=MyRatingsResponse, summary="My ratings")
@limiter.limit(settings.rate_limit)
async def my_ratings(
    request: Request,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await RatingService(db).get_my_ratings(user)
