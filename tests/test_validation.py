from __future__ import annotations

from datetime import date

from package_pricing.pricing.errors import (
    LookupTimeout,
    NoMatchingDuration,
    PackageNotFound,
    PricingError,
    user_message,
)
from package_pricing.pricing.validation import ValidationEngine


def test_parameters_inside_the_package_produce_no_warnings(june_package):
    assert ValidationEngine().validate(3, 3, date(2025, 6, 10), june_package) == []


def test_people_above_largest_tier(june_package):
    warnings = ValidationEngine().validate(9, 3, date(2025, 6, 10), june_package)

    assert [warning.field for warning in warnings] == ["number_of_people"]
    assert "exceeds the maximum group size of 8" in warnings[0].message
    assert warnings[0].suggested_values == (8,)


def test_people_below_smallest_tier(june_package):
    (warning,) = ValidationEngine().validate(1, 3, date(2025, 6, 10), june_package)
    assert "below the minimum group size of 2" in warning.message
    assert warning.suggested_values == (2,)


def test_nights_not_offered_suggests_nearest_duration(june_package):
    (warning,) = ValidationEngine().validate(3, 4, date(2025, 6, 10), june_package)

    assert warning.field == "number_of_nights"
    assert warning.suggested_values == (3, 5)
    assert "available durations: 3, 5" in warning.message


def test_arrival_outside_periods_suggests_closest_period(june_package, make_special):
    june_package.pricing_matrix.append(make_special("Autumn Break", date(2025, 10, 1), date(2025, 10, 5)))

    (warning,) = ValidationEngine().validate(3, 3, date(2025, 7, 2), june_package)
    assert warning.field == "arrival_date"
    assert warning.suggested_values == ("June",)

    (warning,) = ValidationEngine().validate(3, 3, date(2025, 9, 29), june_package)
    assert warning.suggested_values == ("Autumn Break",)


def test_several_problems_are_reported_together(june_package):
    warnings = ValidationEngine().validate(12, 7, date(2025, 1, 1), june_package)
    assert [warning.field for warning in warnings] == ["number_of_people", "number_of_nights", "arrival_date"]
    assert warnings[1].to_dict()["suggested_values"] == ["5"]


def test_user_messages_are_specific():
    assert "no longer available" in user_message(PackageNotFound("pkg"))
    assert "3, 5 nights" in user_message(NoMatchingDuration(4, durations=[3, 5]))
    assert "longer than expected" in user_message(LookupTimeout("pkg", 30))
    assert user_message(PricingError("custom failure")) == "custom failure"
    assert "unexpected error" in user_message(RuntimeError("boom"))
