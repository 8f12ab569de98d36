"""Advisory checks of booking parameters against a package's declared ranges.

Warnings never block a calculation; the calculator's outcome is authoritative.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from package_pricing.packages.models import GroupSizeTier, Package, PeriodEntry


@dataclass(frozen=True, slots=True)
class ValidationWarning:
    field: str
    message: str
    suggested_values: Tuple[object, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "field": self.field,
            "message": self.message,
            "suggested_values": [str(value) for value in self.suggested_values],
        }


def _nearest(values: Sequence[int], target: int) -> Tuple[int, ...]:
    if not values:
        return ()
    best = min(abs(value - target) for value in values)
    return tuple(sorted({value for value in values if abs(value - target) == best}))


def _days_outside(day: date, start: date, end: date) -> int:
    if day < start:
        return (start - day).days
    if day > end:
        return (day - end).days
    return 0


def _month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def _period_distance(day: date, entry: PeriodEntry) -> Optional[int]:
    if entry.is_special:
        if entry.start_date is None or entry.end_date is None:
            return None
        return _days_outside(day, entry.start_date, entry.end_date)
    month = entry.month_number()
    if month is None:
        return None
    # Calendar months recur yearly; measure against the neighbouring years too.
    return min(
        _days_outside(day, *_month_bounds(year, month)) for year in (day.year - 1, day.year, day.year + 1)
    )


class ValidationEngine:
    """Compares requested people/nights/arrival with what a package declares."""

    def validate(self, people: int, nights: int, arrival_date: date, package: Package) -> List[ValidationWarning]:
        warnings: List[ValidationWarning] = []
        people_warning = self._check_people(people, package.tiers)
        if people_warning:
            warnings.append(people_warning)
        nights_warning = self._check_nights(nights, package.durations)
        if nights_warning:
            warnings.append(nights_warning)
        arrival_warning = self._check_arrival(arrival_date, package.pricing_matrix)
        if arrival_warning:
            warnings.append(arrival_warning)
        return warnings

    def _check_people(self, people: int, tiers: Sequence[GroupSizeTier]) -> Optional[ValidationWarning]:
        if any(tier.contains(people) for tier in tiers):
            return None
        if not tiers:
            return ValidationWarning("number_of_people", "Package declares no group size tiers")
        bounds = [bound for tier in tiers for bound in (tier.min_people, tier.max_people)]
        lowest = min(tier.min_people for tier in tiers)
        highest = max(tier.max_people for tier in tiers)
        if people < lowest:
            message = f"{people} people is below the minimum group size of {lowest}"
        elif people > highest:
            message = f"{people} people exceeds the maximum group size of {highest}"
        else:
            message = f"{people} people falls between the package group size tiers"
        return ValidationWarning("number_of_people", message, _nearest(bounds, people))

    def _check_nights(self, nights: int, durations: Sequence[int]) -> Optional[ValidationWarning]:
        if nights in durations:
            return None
        if not durations:
            return ValidationWarning("number_of_nights", "Package declares no durations")
        available = ", ".join(str(value) for value in sorted(durations))
        return ValidationWarning(
            "number_of_nights",
            f"{nights} nights is not offered; available durations: {available}",
            _nearest(durations, nights),
        )

    def _check_arrival(self, arrival_date: date, periods: Sequence[PeriodEntry]) -> Optional[ValidationWarning]:
        distances = [(entry, _period_distance(arrival_date, entry)) for entry in periods]
        measured = [(entry, distance) for entry, distance in distances if distance is not None]
        if any(distance == 0 for _, distance in measured):
            return None
        if not measured:
            return ValidationWarning("arrival_date", "Package declares no usable pricing periods")
        best = min(distance for _, distance in measured)
        suggestions = tuple(entry.period_label for entry, distance in measured if distance == best)
        return ValidationWarning(
            "arrival_date",
            f"Arrival date {arrival_date.isoformat()} is outside the package pricing periods",
            suggestions,
        )
