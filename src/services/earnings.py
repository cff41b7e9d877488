"""
Earnings and payment reporting (read-only).

* ``get_user_earnings``    -- role-scoped share per trip (driver/owner/admin)
* ``get_passenger_history`` -- a passenger's own payments
* ``get_admin_summary``    -- all payments with aggregate totals
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.earnings import DateRange, Page, earnings_view_for
from src.domain.enums import PaymentMethod, PaymentStatus, UserRole
from src.domain.errors import ForbiddenError
from src.infrastructure.models import UserModel
from src.infrastructure.repositories import PaymentRepository

logger = logging.getLogger(__name__)


def _page(page: Optional[int], limit: Optional[int]) -> Page:
    return Page.clamp(
        page,
        limit,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )


class EarningsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.payments = PaymentRepository(session)

    async def get_user_earnings(
        self,
        user: UserModel,
        *,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        payment_status: Optional[PaymentStatus] = None,
        payment_method: Optional[PaymentMethod] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        driver_id: Optional[int] = None,
        owner_id: Optional[int] = None,
    ) -> dict:
        logger.info("Fetching earnings. user_id=%s, role=%s", user.id, user.role)

        view = earnings_view_for(user.role)
        pagination = _page(page, limit)
        dates = DateRange.parse(from_date, to_date)

        # Driver / owner narrowing is an admin-only filter
        is_admin = user.role == UserRole.ADMIN
        payments, total = await self.payments.search(
            scope=view.scope,
            user_id=user.id,
            driver_id=driver_id if is_admin else None,
            owner_id=owner_id if is_admin else None,
            date_from=dates.lower,
            date_to=dates.upper,
            payment_status=payment_status,
            payment_method=payment_method,
            offset=pagination.offset,
            limit=pagination.limit,
        )
        return {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "data": [view.project(p) for p in payments],
        }

    async def get_passenger_history(
        self,
        user: UserModel,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        logger.info("Fetching payment history. passenger_id=%s", user.id)

        if user.role != UserRole.PASSENGER:
            raise ForbiddenError("Only passengers have a payment history")

        pagination = _page(page, limit)
        payments, total = await self.payments.search(
            passenger_id=user.id,
            offset=pagination.offset,
            limit=pagination.limit,
        )
        return {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "data": payments,
        }

    async def get_admin_summary(
        self,
        user: UserModel,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        logger.info(
            "Fetching admin summary. start_date=%s, end_date=%s",
            start_date,
            end_date,
        )

        if user.role != UserRole.ADMIN:
            raise ForbiddenError("Only administrators can view the payment summary")

        dates = DateRange.parse(
            start_date, end_date, start_name="startDate", end_name="endDate"
        )
        payments, total = await self.payments.search(
            date_from=dates.lower, date_to=dates.upper
        )

        zero = Decimal("0.00")
        return {
            "total_payments": total,
            "total_amount": sum((p.amount for p in payments), zero),
            "total_admin_share": sum((p.admin_share for p in payments), zero),
            "total_driver_share": sum((p.driver_share for p in payments), zero),
            "total_owner_share": sum((p.owner_share for p in payments), zero),
            "data": payments,
        }
