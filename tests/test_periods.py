from __future__ import annotations

from datetime import date

import pytest

from package_pricing.packages.models import PeriodEntry, PeriodType
from package_pricing.pricing.errors import NoMatchingPeriod
from package_pricing.pricing.periods import determine_period


def _month(label: str) -> PeriodEntry:
    return PeriodEntry(period_label=label, period_type=PeriodType.CALENDAR_MONTH)


def _special(label: str, start: date, end: date) -> PeriodEntry:
    return PeriodEntry(period_label=label, period_type=PeriodType.SPECIAL_RANGE, start_date=start, end_date=end)


def test_calendar_month_matches_any_year():
    periods = [_month("May"), _month("June")]
    assert determine_period(date(2025, 6, 10), periods).period_label == "June"
    assert determine_period(date(2031, 6, 30), periods).period_label == "June"


def test_month_labels_are_case_insensitive_and_may_be_abbreviated():
    periods = [_month("jan"), _month("  DECEMBER ")]
    assert determine_period(date(2026, 1, 3), periods).period_label == "jan"
    assert determine_period(date(2025, 12, 24), periods).period_label == "  DECEMBER "


def test_special_range_takes_precedence_over_calendar_month():
    easter = _special("Easter", date(2025, 4, 2), date(2025, 4, 6))
    periods = [_month("April"), easter]
    for day in (2, 4, 6):
        assert determine_period(date(2025, 4, day), periods) is easter
    assert determine_period(date(2025, 4, 7), periods).period_label == "April"
    assert determine_period(date(2025, 4, 1), periods).period_label == "April"


def test_special_range_is_tied_to_its_year():
    easter = _special("Easter", date(2025, 4, 2), date(2025, 4, 6))
    assert determine_period(date(2026, 4, 3), [_month("April"), easter]).period_label == "April"


def test_overlapping_special_ranges_pick_earliest_start():
    late = _special("Late Christmas", date(2025, 12, 22), date(2025, 12, 31))
    early = _special("Christmas", date(2025, 12, 20), date(2025, 12, 26))
    assert determine_period(date(2025, 12, 23), [late, early]) is early


def test_overlapping_special_ranges_with_same_start_keep_declaration_order():
    first = _special("A", date(2025, 8, 1), date(2025, 8, 10))
    second = _special("B", date(2025, 8, 1), date(2025, 8, 20))
    assert determine_period(date(2025, 8, 5), [first, second]) is first


def test_no_period_matches():
    with pytest.raises(NoMatchingPeriod) as excinfo:
        determine_period(date(2025, 7, 1), [_month("June"), _special("X", date(2025, 8, 1), date(2025, 8, 2))])
    assert excinfo.value.code == "NO_MATCHING_PERIOD"
    assert excinfo.value.context["periods"] == ["June", "X"]
