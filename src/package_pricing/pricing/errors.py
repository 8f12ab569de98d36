"""Error taxonomy for package price calculation and catalog lookups."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence


class PricingError(Exception):
    """Base class for failures surfaced by the pricing engine."""

    code = "PRICING_ERROR"
    retryable = False

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class CalculationFailure(PricingError):
    """The package cannot price the requested parameters (data or request mismatch)."""

    code = "CALCULATION_ERROR"


class NoMatchingTier(CalculationFailure):
    code = "NO_MATCHING_TIER"

    def __init__(self, people: int, *, tiers: Sequence[str] = ()) -> None:
        available = ", ".join(tiers) or "none"
        super().__init__(
            f"No group size tier covers {people} people (tiers: {available})",
            people=people,
            tiers=list(tiers),
        )


class NoMatchingDuration(CalculationFailure):
    code = "NO_MATCHING_DURATION"

    def __init__(self, nights: int, *, durations: Sequence[int] = ()) -> None:
        available = ", ".join(str(value) for value in durations) or "none"
        super().__init__(
            f"{nights} nights is not available for this package (durations: {available})",
            nights=nights,
            durations=list(durations),
        )


class NoMatchingPeriod(CalculationFailure):
    code = "NO_MATCHING_PERIOD"

    def __init__(self, arrival: Any, *, periods: Sequence[str] = ()) -> None:
        super().__init__(
            f"Arrival date {arrival} is outside the package pricing periods",
            arrival=str(arrival),
            periods=list(periods),
        )


class NoMatchingPricePoint(CalculationFailure):
    """The resolved period has no price for the tier/duration pair."""

    code = "NO_MATCHING_PRICE_POINT"

    def __init__(self, *, period: str, tier_index: int, nights: int) -> None:
        super().__init__(
            f"Pricing period '{period}' has no price for tier {tier_index} and {nights} nights",
            period=period,
            tier_index=tier_index,
            nights=nights,
        )


class LookupFailure(PricingError):
    """The package catalog could not supply the package record."""

    code = "LOOKUP_FAILURE"
    retryable = True


class PackageNotFound(LookupFailure):
    code = "PACKAGE_NOT_FOUND"

    def __init__(self, package_id: str, version: Optional[int] = None) -> None:
        suffix = f" (version {version})" if version is not None else ""
        super().__init__(
            f"Package '{package_id}'{suffix} not found",
            package_id=package_id,
            version=version,
        )


class CatalogUnavailable(LookupFailure):
    code = "CATALOG_UNAVAILABLE"


class LookupTimeout(LookupFailure):
    code = "LOOKUP_TIMEOUT"

    def __init__(self, package_id: str, timeout_s: float) -> None:
        super().__init__(
            f"Package lookup for '{package_id}' timed out after {timeout_s:g}s",
            package_id=package_id,
            timeout_s=timeout_s,
        )


class PriceOnRequestError(PricingError):
    """Raised where a numeric price is mandatory but the package quotes on request."""

    code = "PRICE_ON_REQUEST"

    def __init__(self, *, tier_used: str, period_used: str) -> None:
        super().__init__(
            "The package pricing is set to ON REQUEST for these parameters",
            tier_used=tier_used,
            period_used=period_used,
        )


def user_message(error: BaseException) -> str:
    """UI copy for an error raised while pricing a quote."""
    if isinstance(error, PackageNotFound):
        return "The selected package is no longer available. Please select a different package."
    if isinstance(error, NoMatchingDuration):
        durations = ", ".join(str(value) for value in error.context.get("durations", []))
        return f"The selected duration is not available. Please choose from: {durations} nights."
    if isinstance(error, NoMatchingTier):
        return "The number of people is outside the package group sizes."
    if isinstance(error, NoMatchingPeriod):
        return "The selected date is outside available pricing periods. Please choose a different date."
    if isinstance(error, NoMatchingPricePoint):
        return "The package has no price for this combination. Please enter a price manually."
    if isinstance(error, LookupTimeout):
        return "Price calculation is taking longer than expected. Please try again."
    if isinstance(error, CatalogUnavailable):
        return "Unable to reach the package catalog. Please try again."
    if isinstance(error, PricingError):
        return error.message
    return "An unexpected error occurred. Please try again or contact support."
