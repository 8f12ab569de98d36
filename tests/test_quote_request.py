from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from package_pricing.config.quote_request import QuoteRequest, resolve_arrival

TODAY = date(2025, 1, 31)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-06-10", date(2025, 6, 10)),
        ("+14d", date(2025, 2, 14)),
        ("2w", date(2025, 2, 14)),
        ("+1m", date(2025, 2, 28)),
        ("12M", date(2026, 1, 31)),
    ],
)
def test_resolve_arrival(value, expected):
    assert resolve_arrival(value, TODAY) == expected


def test_resolve_arrival_rejects_garbage():
    with pytest.raises(ValueError):
        resolve_arrival("next tuesday", TODAY)


def test_load_reads_quote_table(tmp_path: Path):
    path = tmp_path / "quote.toml"
    path.write_text(
        """
[quote]
package_id = " pkg-june "
people = 3
nights = 3
arrival = 2025-06-10
manual_price = "399.50"
"""
    )

    request = QuoteRequest.load(path)

    assert request.package_id == "pkg-june"
    assert request.arrival == "2025-06-10"
    assert request.manual_price == Decimal("399.50")
    params = request.parameters(TODAY)
    assert params.number_of_people == 3
    assert params.number_of_nights == 3
    assert params.arrival_date == date(2025, 6, 10)


def test_load_accepts_top_level_keys(tmp_path: Path):
    path = tmp_path / "quote.toml"
    path.write_text('package_id = "pkg-june"\npackage_version = 2\npeople = 2\nnights = 5\narrival = "+7d"\n')

    request = QuoteRequest.load(path)

    assert request.package_version == 2
    assert request.resolve_arrival(TODAY) == date(2025, 2, 7)


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        QuoteRequest.load(tmp_path / "absent.toml")


@pytest.mark.parametrize(
    "overrides",
    [{"package_id": "   "}, {"people": 0}, {"nights": 0}, {"package_version": 0}, {"manual_price": "-1"}],
)
def test_invalid_requests(overrides):
    data = {"package_id": "pkg-june", "people": 2, "nights": 3, "arrival": "2025-06-10"}
    data.update(overrides)
    with pytest.raises(ValidationError):
        QuoteRequest(**data)
