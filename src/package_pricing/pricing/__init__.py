"""Price calculation: tier and period matching, validation and errors."""

from .calculator import CalculationResult, OnRequestResult, PriceBreakdown, PriceCalculator, calculate_price
from .errors import (
    CalculationFailure,
    CatalogUnavailable,
    LookupFailure,
    LookupTimeout,
    NoMatchingDuration,
    NoMatchingPeriod,
    NoMatchingPricePoint,
    NoMatchingTier,
    PackageNotFound,
    PriceOnRequestError,
    PricingError,
    user_message,
)
from .periods import determine_period
from .recalculation import PriceComparison, preview_recalculation
from .tiers import TierMatch, determine_tier
from .validation import ValidationEngine, ValidationWarning

__all__ = [
    "CalculationFailure",
    "CalculationResult",
    "CatalogUnavailable",
    "LookupFailure",
    "LookupTimeout",
    "NoMatchingDuration",
    "NoMatchingPeriod",
    "NoMatchingPricePoint",
    "NoMatchingTier",
    "OnRequestResult",
    "PackageNotFound",
    "PriceBreakdown",
    "PriceCalculator",
    "PriceComparison",
    "PriceOnRequestError",
    "PricingError",
    "TierMatch",
    "ValidationEngine",
    "ValidationWarning",
    "calculate_price",
    "determine_period",
    "determine_tier",
    "preview_recalculation",
    "user_message",
]
