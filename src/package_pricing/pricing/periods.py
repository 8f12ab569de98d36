"""Pricing period resolution for an arrival date."""
from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from package_pricing.packages.models import PeriodEntry
from package_pricing.pricing.errors import NoMatchingPeriod

logger = logging.getLogger(__name__)


def determine_period(arrival_date: date, periods: Sequence[PeriodEntry]) -> PeriodEntry:
    """Resolve ``arrival_date`` to one entry of the pricing matrix.

    Special date ranges (inclusive on both ends) take precedence over calendar
    months. When several special ranges contain the date, the one starting
    earliest wins; equal start dates keep declaration order. Without a special
    match the calendar-month entry named after the arrival month is used,
    whatever the year.
    """
    specials = [entry for entry in periods if entry.is_special and entry.contains(arrival_date)]
    if specials:
        if len(specials) > 1:
            logger.warning(
                "Overlapping special periods for %s: %s; using earliest start date",
                arrival_date,
                ", ".join(entry.period_label for entry in specials),
            )
        return min(specials, key=lambda entry: entry.start_date)

    for entry in periods:
        if entry.month_number() == arrival_date.month:
            return entry

    raise NoMatchingPeriod(arrival_date, periods=[entry.period_label for entry in periods])
