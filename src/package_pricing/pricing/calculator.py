"""Package price calculation.

``calculate_price`` is the pure core: package record plus booking parameters in,
``PriceBreakdown`` or ``OnRequestResult`` out, ``CalculationFailure`` raised when
the matrix cannot price the request. ``PriceCalculator`` adds the single catalog
lookup in front of it.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from package_pricing.packages.models import OnRequest, Package
from package_pricing.pricing.errors import LookupTimeout, NoMatchingDuration, NoMatchingPricePoint
from package_pricing.pricing.periods import determine_period
from package_pricing.pricing.tiers import determine_tier

if TYPE_CHECKING:  # pragma: no cover
    from package_pricing.packages.catalog import PackageCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """Result of one successful calculation; never persisted."""

    price_per_person: Decimal
    number_of_people: int
    total_price: Decimal
    tier_used: str
    tier_index: int
    period_used: str
    currency: str

    def to_dict(self) -> dict[str, object]:
        return {
            "price_per_person": str(self.price_per_person),
            "number_of_people": self.number_of_people,
            "total_price": str(self.total_price),
            "tier_used": self.tier_used,
            "tier_index": self.tier_index,
            "period_used": self.period_used,
            "currency": self.currency,
        }


@dataclass(frozen=True, slots=True)
class OnRequestResult:
    """The matrix resolves to ``ON_REQUEST``: a valid outcome needing a manual price."""

    tier_used: str
    tier_index: int
    period_used: str
    currency: str
    number_of_people: int

    def to_dict(self) -> dict[str, object]:
        return {
            "price": OnRequest.ON_REQUEST.value,
            "tier_used": self.tier_used,
            "tier_index": self.tier_index,
            "period_used": self.period_used,
            "currency": self.currency,
            "number_of_people": self.number_of_people,
        }


CalculationResult = Union[PriceBreakdown, OnRequestResult]


def calculate_price(package: Package, people: int, nights: int, arrival_date: date) -> CalculationResult:
    """Price ``people`` travellers staying ``nights`` nights from ``arrival_date``.

    The package status is not checked; deactivated packages still price the
    quotes already linked to them.
    """
    match = determine_tier(people, package.tiers)
    if nights not in package.durations:
        raise NoMatchingDuration(nights, durations=sorted(package.durations))
    period = determine_period(arrival_date, package.pricing_matrix)
    point = period.price_for(match.tier_index, nights)
    if point is None:
        raise NoMatchingPricePoint(period=period.period_label, tier_index=match.tier_index, nights=nights)

    if isinstance(point.price, OnRequest):
        return OnRequestResult(
            tier_used=match.tier.label,
            tier_index=match.tier_index,
            period_used=period.period_label,
            currency=package.currency,
            number_of_people=people,
        )
    return PriceBreakdown(
        price_per_person=point.price,
        number_of_people=people,
        total_price=point.price * people,
        tier_used=match.tier.label,
        tier_index=match.tier_index,
        period_used=period.period_label,
        currency=package.currency,
    )


class PriceCalculator:
    """Loads packages from a catalog and prices them."""

    def __init__(self, catalog: PackageCatalog, *, lookup_timeout_s: Optional[float] = None) -> None:
        self.catalog = catalog
        self.lookup_timeout_s = lookup_timeout_s

    async def load(self, package_id: str, version: Optional[int] = None) -> Package:
        if self.lookup_timeout_s is None:
            return await self.catalog.get(package_id, version)
        try:
            return await asyncio.wait_for(self.catalog.get(package_id, version), self.lookup_timeout_s)
        except asyncio.TimeoutError as exc:
            logger.warning("Catalog lookup for %s timed out after %ss", package_id, self.lookup_timeout_s)
            raise LookupTimeout(package_id, self.lookup_timeout_s) from exc

    async def calculate(
        self,
        package_id: str,
        people: int,
        nights: int,
        arrival_date: date,
        *,
        version: Optional[int] = None,
    ) -> CalculationResult:
        package = await self.load(package_id, version)
        result = calculate_price(package, people, nights, arrival_date)
        logger.debug(
            "Priced %s v%s for %s people / %s nights from %s: %s",
            package.package_id,
            package.version,
            people,
            nights,
            arrival_date,
            result,
        )
        return result
