"""Dataclasses for Super Offer Package records and their pricing matrix."""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union


class OnRequest(Enum):
    """Sentinel for a price that has to be quoted manually."""

    ON_REQUEST = "ON_REQUEST"

    def __str__(self) -> str:
        return self.value


ON_REQUEST = OnRequest.ON_REQUEST

Price = Union[Decimal, OnRequest]


def parse_price(value: Any) -> Price:
    """Coerce a raw catalog value into a ``Decimal`` or ``ON_REQUEST``."""
    if isinstance(value, OnRequest):
        return value
    if isinstance(value, str) and value.strip().upper().replace(" ", "_") == ON_REQUEST.value:
        return ON_REQUEST
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid price value: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid price value: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Price must be a non-negative number, got {value!r}")
    return amount


def price_to_json(value: Optional[Price]) -> Optional[object]:
    if value is None:
        return None
    if isinstance(value, OnRequest):
        return value.value
    return str(value)


def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Catalog exports carry full timestamps ("2025-04-02T00:00:00.000Z").
    return date.fromisoformat(text[:10])


_MONTH_LOOKUP: Dict[str, int] = {}
for _number in range(1, 13):
    _MONTH_LOOKUP[calendar.month_name[_number].lower()] = _number
    _MONTH_LOOKUP[calendar.month_abbr[_number].lower()] = _number
_MONTH_LOOKUP["sept"] = 9


def month_from_label(label: str) -> Optional[int]:
    """Return the month number named by ``label`` (``"June"``, ``"jun"``), if any."""
    return _MONTH_LOOKUP.get(label.strip().lower())


class PeriodType(str, Enum):
    CALENDAR_MONTH = "calendar-month"
    SPECIAL_RANGE = "special-range"

    @classmethod
    def parse(cls, value: Any) -> "PeriodType":
        if isinstance(value, PeriodType):
            return value
        text = str(value).strip().lower()
        aliases = {"month": cls.CALENDAR_MONTH, "special": cls.SPECIAL_RANGE}
        if text in aliases:
            return aliases[text]
        return cls(text)


class PackageStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class GroupSizeTier:
    """A labelled party-size bracket, inclusive on both ends."""

    label: str
    min_people: int
    max_people: int

    def contains(self, people: int) -> bool:
        return self.min_people <= people <= self.max_people

    def to_dict(self) -> dict[str, object]:
        return {"label": self.label, "min_people": self.min_people, "max_people": self.max_people}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupSizeTier":
        return cls(
            label=str(data["label"]),
            min_people=int(data.get("min_people", data.get("minPeople"))),
            max_people=int(data.get("max_people", data.get("maxPeople"))),
        )


@dataclass(frozen=True, slots=True)
class PricePoint:
    tier_index: int
    nights: int
    price: Price

    def to_dict(self) -> dict[str, object]:
        return {"tier_index": self.tier_index, "nights": self.nights, "price": price_to_json(self.price)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricePoint":
        tier_index = data.get("tier_index", data.get("groupSizeTierIndex", data.get("tierIndex")))
        return cls(
            tier_index=int(tier_index),
            nights=int(data["nights"]),
            price=parse_price(data["price"]),
        )


@dataclass(slots=True)
class PeriodEntry:
    """One column group of the pricing matrix: a month or a special date range."""

    period_label: str
    period_type: PeriodType
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price_points: List[PricePoint] = field(default_factory=list)

    @property
    def is_special(self) -> bool:
        return self.period_type is PeriodType.SPECIAL_RANGE

    def contains(self, day: date) -> bool:
        if not self.is_special or self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date

    def month_number(self) -> Optional[int]:
        if self.is_special:
            return None
        return month_from_label(self.period_label)

    def price_for(self, tier_index: int, nights: int) -> Optional[PricePoint]:
        for point in self.price_points:
            if point.tier_index == tier_index and point.nights == nights:
                return point
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "period_label": self.period_label,
            "period_type": self.period_type.value,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "price_points": [point.to_dict() for point in self.price_points],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PeriodEntry":
        points = data.get("price_points", data.get("prices", [])) or []
        return cls(
            period_label=str(data.get("period_label", data.get("period"))),
            period_type=PeriodType.parse(data.get("period_type", data.get("periodType"))),
            start_date=_parse_date(data.get("start_date", data.get("startDate"))),
            end_date=_parse_date(data.get("end_date", data.get("endDate"))),
            price_points=[PricePoint.from_dict(point) for point in points],
        )


@dataclass(slots=True)
class Package:
    """Read-only view of a Super Offer Package as served by the catalog."""

    package_id: str
    version: int
    name: str
    currency: str
    tiers: List[GroupSizeTier] = field(default_factory=list)
    durations: List[int] = field(default_factory=list)
    pricing_matrix: List[PeriodEntry] = field(default_factory=list)
    status: PackageStatus = PackageStatus.ACTIVE

    def to_dict(self) -> dict[str, object]:
        return {
            "package_id": self.package_id,
            "version": self.version,
            "name": self.name,
            "currency": self.currency,
            "status": self.status.value,
            "tiers": [tier.to_dict() for tier in self.tiers],
            "durations": list(self.durations),
            "pricing_matrix": [entry.to_dict() for entry in self.pricing_matrix],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Package":
        package_id = data.get("package_id", data.get("packageId", data.get("id")))
        if package_id in (None, ""):
            raise ValueError("Package record is missing an identifier")
        tiers = data.get("tiers", data.get("groupSizeTiers", [])) or []
        durations = data.get("durations", data.get("durationOptions", [])) or []
        matrix = data.get("pricing_matrix", data.get("pricingMatrix", [])) or []
        return cls(
            package_id=str(package_id),
            version=int(data.get("version", 1)),
            name=str(data.get("name", package_id)),
            currency=str(data.get("currency", "EUR")),
            status=PackageStatus(str(data.get("status", PackageStatus.ACTIVE.value)).lower()),
            tiers=[GroupSizeTier.from_dict(tier) for tier in tiers],
            durations=[int(nights) for nights in durations],
            pricing_matrix=[PeriodEntry.from_dict(entry) for entry in matrix],
        )

    @classmethod
    def from_iterable(cls, records: Iterable[Mapping[str, Any]]) -> List["Package"]:
        return [cls.from_dict(record) for record in records]
