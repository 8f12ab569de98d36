"""State carried by a quote's price synchronisation with its linked package."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from package_pricing.packages.models import Price, parse_price, price_to_json
from package_pricing.pricing.calculator import PriceBreakdown
from package_pricing.pricing.errors import PricingError, user_message
from package_pricing.pricing.validation import ValidationWarning


class SyncStatus(str, Enum):
    SYNCED = "synced"
    CALCULATING = "calculating"
    CUSTOM = "custom"
    ERROR = "error"
    OUT_OF_SYNC = "out-of-sync"


class CustomReason(str, Enum):
    MANUAL = "manual"
    ON_REQUEST = "on-request"


class PriceChangeReason(str, Enum):
    PACKAGE_SELECTION = "package_selection"
    RECALCULATION = "recalculation"
    MANUAL_OVERRIDE = "manual_override"


@dataclass(frozen=True, slots=True)
class QuoteParameters:
    number_of_people: int
    number_of_nights: int
    arrival_date: date

    def to_dict(self) -> dict[str, object]:
        return {
            "number_of_people": self.number_of_people,
            "number_of_nights": self.number_of_nights,
            "arrival_date": self.arrival_date.isoformat(),
        }


@dataclass(slots=True)
class LinkedPackageInfo:
    """Snapshot of the package pricing a quote was built from.

    Tier and price fields stay ``None`` until a calculation for the link has
    resolved a tier and period.
    """

    package_id: str
    package_version: Optional[int] = None
    package_name: Optional[str] = None
    tier_index: Optional[int] = None
    tier_label: Optional[str] = None
    period_used: Optional[str] = None
    price_per_person: Optional[Price] = None
    total_price: Optional[Price] = None
    currency: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "package_id": self.package_id,
            "package_version": self.package_version,
            "package_name": self.package_name,
            "tier_index": self.tier_index,
            "tier_label": self.tier_label,
            "period_used": self.period_used,
            "price_per_person": price_to_json(self.price_per_person),
            "total_price": price_to_json(self.total_price),
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LinkedPackageInfo":
        def _price(key: str) -> Optional[Price]:
            value = data.get(key)
            return None if value is None else parse_price(value)

        version = data.get("package_version")
        tier_index = data.get("tier_index")
        return cls(
            package_id=str(data["package_id"]),
            package_version=int(version) if version is not None else None,
            package_name=data.get("package_name"),
            tier_index=int(tier_index) if tier_index is not None else None,
            tier_label=data.get("tier_label"),
            period_used=data.get("period_used"),
            price_per_person=_price("price_per_person"),
            total_price=_price("total_price"),
            currency=data.get("currency"),
        )

    def breakdown(self, number_of_people: int) -> Optional[PriceBreakdown]:
        """Rebuild the breakdown a numeric snapshot was taken from."""
        if not isinstance(self.price_per_person, Decimal) or self.tier_index is None:
            return None
        return PriceBreakdown(
            price_per_person=self.price_per_person,
            number_of_people=number_of_people,
            total_price=self.price_per_person * number_of_people,
            tier_used=self.tier_label or "",
            tier_index=self.tier_index,
            period_used=self.period_used or "",
            currency=self.currency or "",
        )


@dataclass(frozen=True, slots=True)
class SyncError:
    code: str
    message: str
    retryable: bool

    @classmethod
    def from_exception(cls, error: PricingError) -> "SyncError":
        return cls(code=error.code, message=user_message(error), retryable=error.retryable)

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


@dataclass(slots=True)
class SyncState:
    status: SyncStatus
    custom_reason: Optional[CustomReason] = None
    last_breakdown: Optional[PriceBreakdown] = None
    last_error: Optional[SyncError] = None
    request_sequence: int = 0


@dataclass(frozen=True, slots=True)
class PriceHistoryEntry:
    price: Decimal
    reason: PriceChangeReason
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class SyncSnapshot:
    """What observers of a controller see after each change."""

    status: Optional[SyncStatus]
    breakdown: Optional[PriceBreakdown]
    error: Optional[SyncError]
    validation_warnings: Tuple[ValidationWarning, ...]
    linked_package: Optional[LinkedPackageInfo]
    price: Optional[Decimal]
    events_total: Decimal = Decimal("0")
    custom_reason: Optional[CustomReason] = None
    request_sequence: int = 0

    @property
    def price_on_request(self) -> bool:
        return self.status is SyncStatus.CUSTOM and self.custom_reason is CustomReason.ON_REQUEST

    @property
    def is_stale(self) -> bool:
        return self.status in (SyncStatus.OUT_OF_SYNC, SyncStatus.CALCULATING)

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value if self.status else None,
            "custom_reason": self.custom_reason.value if self.custom_reason else None,
            "price_on_request": self.price_on_request,
            "price": str(self.price) if self.price is not None else None,
            "events_total": str(self.events_total),
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "error": self.error.to_dict() if self.error else None,
            "validation_warnings": [warning.to_dict() for warning in self.validation_warnings],
            "linked_package": self.linked_package.to_dict() if self.linked_package else None,
            "request_sequence": self.request_sequence,
        }

