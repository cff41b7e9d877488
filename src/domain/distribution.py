"""
Payment Distribution Engine
===========================

Splits a trip payment between the platform (admin), the driver and the
vehicle owner.

Algorithm (integer cents throughout)
------------------------------------
1. ``total  = round(amount x 100)``
2. ``admin  = round(total x admin_rate)``                 -- flat 10 %
3. ``rest   = total - admin``
4. with owner:    ``owner = round(rest x owner_share)``   -- 40 % of rest
                  ``driver = rest - owner``               -- takes residue
   without owner: ``owner = 0``, ``driver = rest``
5. ``admin + driver + owner == total`` or ``DistributionError``

With the defaults the overall split is 10 / 36 / 54 (admin / owner /
driver), or 10 / 0 / 90 when the vehicle has no owner.

All rounding is half-up on ``Decimal`` so no binary floating point is
involved at any step.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from .entities import Distribution
from .errors import InternalError

logger = logging.getLogger(__name__)

ADMIN_SHARE_RATE = Decimal("0.10")
OWNER_SHARE_OF_REMAINING = Decimal("0.4")


class DistributionError(InternalError):
    """The computed shares do not add up to the payment amount."""


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount: Decimal | int | float | str) -> int:
    return _round_half_up(Decimal(str(amount)) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def reconcile(admin: int, driver: int, owner: int, total: int) -> None:
    """Fail loudly when the shares do not sum to *total* cents."""
    if admin + driver + owner != total:
        logger.error(
            "Distribution error: admin=%d, driver=%d, owner=%d, total=%d",
            admin,
            driver,
            owner,
            total,
        )
        raise DistributionError("Error calculating the payment distribution")


def calculate_distribution(
    amount: Decimal | int | float | str,
    has_owner: bool,
    owner_share_of_remaining: Decimal = OWNER_SHARE_OF_REMAINING,
    admin_rate: Decimal = ADMIN_SHARE_RATE,
) -> Distribution:
    total_cents = to_cents(amount)

    admin_cents = _round_half_up(Decimal(total_cents) * Decimal(admin_rate))
    remaining_cents = total_cents - admin_cents

    if has_owner:
        owner_cents = _round_half_up(
            Decimal(remaining_cents) * Decimal(owner_share_of_remaining)
        )
        driver_cents = remaining_cents - owner_cents
    else:
        driver_cents = remaining_cents
        owner_cents = 0

    reconcile(admin_cents, driver_cents, owner_cents, total_cents)

    return Distribution(
        admin_share=from_cents(admin_cents),
        driver_share=from_cents(driver_cents),
        owner_share=from_cents(owner_cents),
    )
