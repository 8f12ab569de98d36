from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

import pytest

from package_pricing.packages.models import (
    GroupSizeTier,
    Package,
    PackageStatus,
    PeriodEntry,
    PeriodType,
    PricePoint,
    parse_price,
)


def build_package(
    *,
    package_id: str = "pkg-june",
    version: int = 1,
    points: Optional[dict[tuple[int, int], object]] = None,
    extra_periods: Iterable[PeriodEntry] = (),
    status: PackageStatus = PackageStatus.ACTIVE,
) -> Package:
    """Two tiers, 3 or 5 nights, one June calendar-month period."""
    points = points if points is not None else {(0, 3): 150, (1, 3): 120}
    june = PeriodEntry(
        period_label="June",
        period_type=PeriodType.CALENDAR_MONTH,
        price_points=[
            PricePoint(tier_index=tier, nights=nights, price=parse_price(price))
            for (tier, nights), price in points.items()
        ],
    )
    return Package(
        package_id=package_id,
        version=version,
        name="Benidorm Super Offer",
        currency="EUR",
        status=status,
        tiers=[GroupSizeTier("2-4", 2, 4), GroupSizeTier("5-8", 5, 8)],
        durations=[3, 5],
        pricing_matrix=[june, *extra_periods],
    )


def special_period(label: str, start: date, end: date, price: object = 200) -> PeriodEntry:
    return PeriodEntry(
        period_label=label,
        period_type=PeriodType.SPECIAL_RANGE,
        start_date=start,
        end_date=end,
        price_points=[
            PricePoint(tier_index=0, nights=3, price=parse_price(price)),
            PricePoint(tier_index=1, nights=3, price=parse_price(price)),
        ],
    )


@pytest.fixture
def june_package() -> Package:
    return build_package()


@pytest.fixture
def make_package():
    return build_package


@pytest.fixture
def make_special():
    return special_period
