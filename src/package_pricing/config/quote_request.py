"""Quote requests loaded from TOML for manual pricing runs."""
from __future__ import annotations

import calendar
import re
import tomllib
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from package_pricing.sync.state import QuoteParameters

_RELATIVE_ARRIVAL = re.compile(r"^\+?(?P<count>\d+)\s*(?P<unit>[dDwWmM])$")


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_arrival(value: str, today: date) -> date:
    """Parse an ISO date or a relative offset (``+14d``, ``2w``, ``1m``)."""
    text = value.strip()
    match = _RELATIVE_ARRIVAL.match(text)
    if not match:
        return date.fromisoformat(text)
    count = int(match.group("count"))
    unit = match.group("unit").lower()
    if unit == "d":
        return today + timedelta(days=count)
    if unit == "w":
        return today + timedelta(weeks=count)
    return _add_months(today, count)


class QuoteRequest(BaseModel):
    """One pricing request: which package and which booking parameters."""

    package_id: str
    package_version: Optional[int] = Field(default=None, ge=1)
    people: int = Field(ge=1)
    nights: int = Field(ge=1)
    arrival: str = Field(description="ISO 8601 date or relative offset such as '+14d'")
    manual_price: Optional[Decimal] = Field(default=None, ge=0)
    events_total: Decimal = Field(default=Decimal("0"), ge=0, description="Event add-ons priced on top of the package")

    @field_validator("package_id", mode="before")
    @classmethod
    def _strip_package_id(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("package_id must not be blank")
        return value

    @field_validator("arrival", mode="before")
    @classmethod
    def _coerce_arrival(cls, value: object) -> object:
        if isinstance(value, date):
            return value.isoformat()
        return value

    def resolve_arrival(self, today: Optional[date] = None) -> date:
        return resolve_arrival(self.arrival, today or date.today())

    def parameters(self, today: Optional[date] = None) -> QuoteParameters:
        return QuoteParameters(
            number_of_people=self.people,
            number_of_nights=self.nights,
            arrival_date=self.resolve_arrival(today),
        )

    @classmethod
    def load(cls, path: Path) -> "QuoteRequest":
        if not path.exists():
            raise FileNotFoundError(f"Quote request not found at {path}")
        with path.open("rb") as handle:
            data = tomllib.load(handle)
        return cls.model_validate(data.get("quote", data))
