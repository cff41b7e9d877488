"""
Fare Calculator  (Strategy Pattern)
===================================

Formula
-------
Cost = Distance_KM x Price_Per_KM        (rounded half-up to 2 decimals)

There is no base fare and no minimum fare: the per-vehicle-type pricing
rules are not applied to trip creation.  A rule-table strategy can be
plugged in through ``PricingStrategy`` when that changes.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal

from .distance import compute_distance_km
from .entities import Location

CENT = Decimal("0.01")


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float) -> Decimal: ...


class PerKmPricing(PricingStrategy):
    def __init__(self, price_per_km: Decimal = Decimal("3000")):
        self.price_per_km = Decimal(price_per_km)

    def calculate(self, distance_km: float) -> Decimal:
        raw = Decimal(str(distance_km)) * self.price_per_km
        return raw.quantize(CENT, rounding=ROUND_HALF_UP)


# ── Calculator facade ─────────────────────────────────────────────────


class FareCalculator:
    """High-level API used by the trip service."""

    def __init__(self, strategy: PricingStrategy | None = None):
        self.strategy = strategy or PerKmPricing()

    def compute_cost(self, distance_km: float) -> Decimal:
        return self.strategy.calculate(distance_km)

    def quote(
        self, origin: Location, destination: Location
    ) -> tuple[Decimal, Decimal]:
        """Return ``(distance_km, cost)`` for a trip between two points."""
        distance = compute_distance_km(
            origin.latitude,
            origin.longitude,
            destination.latitude,
            destination.longitude,
        )
        distance_km = Decimal(str(distance)).quantize(CENT)
        return distance_km, self.compute_cost(distance)
