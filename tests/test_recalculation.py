from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from package_pricing.packages.catalog import InMemoryPackageCatalog
from package_pricing.pricing.calculator import PriceCalculator
from package_pricing.pricing.errors import NoMatchingDuration, PriceOnRequestError
from package_pricing.pricing.recalculation import percentage_change, preview_recalculation
from package_pricing.sync.state import LinkedPackageInfo, QuoteParameters

PARAMS = QuoteParameters(number_of_people=3, number_of_nights=3, arrival_date=date(2025, 6, 10))


@pytest.mark.parametrize(
    ("old", "new", "expected"),
    [("450", "480", "6.67"), ("450", "450", "0.00"), ("400", "300", "-25.00"), ("0", "300", "0.00")],
)
def test_percentage_change(old, new, expected):
    assert percentage_change(Decimal(old), Decimal(new)) == Decimal(expected)


@pytest.mark.asyncio
async def test_preview_against_newer_version(make_package):
    catalog = InMemoryPackageCatalog(
        [make_package(version=1), make_package(version=2, points={(0, 3): 160, (1, 3): 120})]
    )
    linked = LinkedPackageInfo(package_id="pkg-june", package_version=1)

    comparison = await preview_recalculation(PriceCalculator(catalog), linked, PARAMS, Decimal("450"))

    assert comparison.new_price == Decimal("480")
    assert comparison.price_difference == Decimal("30")
    assert comparison.percentage_change == Decimal("6.67")
    assert comparison.package_version_changed
    assert comparison.to_dict()["breakdown"]["period_used"] == "June"


@pytest.mark.asyncio
async def test_preview_on_unchanged_version(june_package):
    linked = LinkedPackageInfo(package_id="pkg-june", package_version=1)
    comparison = await preview_recalculation(
        PriceCalculator(InMemoryPackageCatalog([june_package])), linked, PARAMS, Decimal("400")
    )
    assert not comparison.package_version_changed
    assert comparison.price_difference == Decimal("50")


@pytest.mark.asyncio
async def test_preview_refuses_on_request_price(make_package):
    catalog = InMemoryPackageCatalog([make_package(points={(0, 3): "ON_REQUEST"})])
    linked = LinkedPackageInfo(package_id="pkg-june")
    with pytest.raises(PriceOnRequestError):
        await preview_recalculation(PriceCalculator(catalog), linked, PARAMS, Decimal("450"))


@pytest.mark.asyncio
async def test_preview_propagates_calculation_errors(june_package):
    params = QuoteParameters(number_of_people=3, number_of_nights=4, arrival_date=date(2025, 6, 10))
    with pytest.raises(NoMatchingDuration):
        await preview_recalculation(
            PriceCalculator(InMemoryPackageCatalog([june_package])),
            LinkedPackageInfo(package_id="pkg-june"),
            params,
            Decimal("450"),
        )
