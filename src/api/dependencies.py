"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database import async_session_factory
from src.infrastructure.models import UserModel
from src.infrastructure.repositories import UserRepository


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user(
    x_user_id: Optional[int] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """
    Resolve the acting user.

    Token verification happens upstream; by the time a request reaches
    this service the authenticated user id travels in ``X-User-Id``.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = await UserRepository(db).get_by_id(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user
