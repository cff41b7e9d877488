"""
Earnings views, pagination and date filters.

Each role that may read earnings gets its own ``EarningsView`` variant.
A view decides two things only: which participant column scopes the
payments (``scope``) and which share of a payment the role sees
(``share``).  Anything else is rejected by ``earnings_view_for``.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from .enums import UserRole
from .errors import BusinessRuleError, ForbiddenError

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 50


# ── Pagination ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def clamp(
        cls,
        page: Optional[int],
        limit: Optional[int],
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> "Page":
        """Out-of-range values are clamped, never rejected."""
        if page is None or page < 1:
            page = 1
        if limit is None or limit < 1:
            limit = default_limit
        if limit > max_limit:
            limit = max_limit
        return cls(page=page, limit=limit)


# ── Date range ────────────────────────────────────────────────────────


def _parse_day(value: Optional[str], name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise BusinessRuleError(
            f"{name} does not have a valid date format (YYYY-MM-DD)"
        ) from None


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def parse(
        cls,
        start: Optional[str],
        end: Optional[str],
        start_name: str = "fromDate",
        end_name: str = "toDate",
    ) -> "DateRange":
        start_day = _parse_day(start, start_name)
        end_day = _parse_day(end, end_name)
        if start_day and end_day and start_day > end_day:
            raise BusinessRuleError(
                f"{start_name} cannot be greater than {end_name}"
            )
        return cls(start_day, end_day)

    @property
    def lower(self) -> Optional[datetime]:
        """Inclusive lower bound (start of the first day, UTC)."""
        if self.start is None:
            return None
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def upper(self) -> Optional[datetime]:
        """Exclusive upper bound (start of the day after ``end``, UTC)."""
        if self.end is None:
            return None
        return datetime.combine(
            self.end + timedelta(days=1), time.min, tzinfo=timezone.utc
        )


# ── Role views ────────────────────────────────────────────────────────


class EarningsScope(str, enum.Enum):
    DRIVER = "driver"
    OWNER = "owner"
    ALL = "all"


class EarningsView(ABC):
    role: UserRole
    scope: EarningsScope

    @abstractmethod
    def share(self, payment: Any) -> Decimal: ...

    def project(self, payment: Any) -> dict:
        return {
            "trip_id": payment.trip_id,
            "amount": self.share(payment),
            "payment_date": payment.payment_date,
            "payment_status": payment.payment_status,
        }


class DriverEarnings(EarningsView):
    role = UserRole.DRIVER
    scope = EarningsScope.DRIVER

    def share(self, payment: Any) -> Decimal:
        return payment.driver_share


class OwnerEarnings(EarningsView):
    role = UserRole.OWNER
    scope = EarningsScope.OWNER

    def share(self, payment: Any) -> Decimal:
        return payment.owner_share


class AdminEarnings(EarningsView):
    role = UserRole.ADMIN
    scope = EarningsScope.ALL

    def share(self, payment: Any) -> Decimal:
        return payment.admin_share


EARNINGS_VIEWS: dict[UserRole, EarningsView] = {
    view.role: view for view in (DriverEarnings(), OwnerEarnings(), AdminEarnings())
}


def earnings_view_for(role: UserRole) -> EarningsView:
    try:
        return EARNINGS_VIEWS[UserRole(role)]
    except (KeyError, ValueError):
        raise ForbiddenError(
            "This service is only available for drivers, owners, or administrators"
        ) from None
