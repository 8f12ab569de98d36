"""Preview what a fresh calculation would do to a saved quote's price."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Optional

from package_pricing.pricing.calculator import (
    OnRequestResult,
    PriceBreakdown,
    PriceCalculator,
    calculate_price,
)
from package_pricing.pricing.errors import PriceOnRequestError

if TYPE_CHECKING:  # pragma: no cover
    from package_pricing.sync.state import LinkedPackageInfo, QuoteParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceComparison:
    old_price: Decimal
    new_price: Decimal
    price_difference: Decimal
    percentage_change: Decimal
    currency: str
    linked_version: Optional[int]
    current_version: int
    breakdown: PriceBreakdown

    @property
    def package_version_changed(self) -> bool:
        return self.linked_version is not None and self.linked_version != self.current_version

    def to_dict(self) -> dict[str, object]:
        return {
            "old_price": str(self.old_price),
            "new_price": str(self.new_price),
            "price_difference": str(self.price_difference),
            "percentage_change": str(self.percentage_change),
            "currency": self.currency,
            "linked_version": self.linked_version,
            "current_version": self.current_version,
            "package_version_changed": self.package_version_changed,
            "breakdown": self.breakdown.to_dict(),
        }


def percentage_change(old: Decimal, new: Decimal) -> Decimal:
    if old <= 0:
        return Decimal("0.00")
    return ((new - old) / old * Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


async def preview_recalculation(
    calculator: PriceCalculator,
    linked: "LinkedPackageInfo",
    parameters: "QuoteParameters",
    current_price: Decimal,
) -> PriceComparison:
    """Price the quote against the latest package version without applying anything.

    Calculation and lookup errors propagate; an on-request result raises
    :class:`PriceOnRequestError` since there is no number to compare.
    """
    package = await calculator.load(linked.package_id)
    result = calculate_price(
        package,
        parameters.number_of_people,
        parameters.number_of_nights,
        parameters.arrival_date,
    )
    if isinstance(result, OnRequestResult):
        raise PriceOnRequestError(tier_used=result.tier_used, period_used=result.period_used)

    difference = result.total_price - current_price
    comparison = PriceComparison(
        old_price=current_price,
        new_price=result.total_price,
        price_difference=difference,
        percentage_change=percentage_change(current_price, result.total_price),
        currency=result.currency,
        linked_version=linked.package_version,
        current_version=package.version,
        breakdown=result,
    )
    logger.info(
        "Recalculation preview for %s: %s -> %s (%s%%)",
        linked.package_id,
        current_price,
        result.total_price,
        comparison.percentage_change,
    )
    return comparison
