from __future__ import annotations

import pytest

from package_pricing.packages.models import GroupSizeTier
from package_pricing.pricing.errors import NoMatchingTier
from package_pricing.pricing.tiers import determine_tier

TIERS = [GroupSizeTier("2-4", 2, 4), GroupSizeTier("5-8", 5, 8), GroupSizeTier("12-20", 12, 20)]


@pytest.mark.parametrize(
    ("people", "expected_index"),
    [(2, 0), (3, 0), (4, 0), (5, 1), (8, 1), (12, 2), (20, 2)],
)
def test_people_inside_tier_bounds_resolve_to_that_tier(people, expected_index):
    match = determine_tier(people, TIERS)
    assert match.tier_index == expected_index
    assert match.tier is TIERS[expected_index]


@pytest.mark.parametrize("people", [0, 1, 9, 11, 21])
def test_people_outside_or_between_tiers_fail(people):
    with pytest.raises(NoMatchingTier) as excinfo:
        determine_tier(people, TIERS)
    assert excinfo.value.code == "NO_MATCHING_TIER"
    assert excinfo.value.context["tiers"] == ["2-4", "5-8", "12-20"]


def test_every_party_size_matches_at_most_one_tier():
    for people in range(0, 25):
        matching = [tier for tier in TIERS if tier.contains(people)]
        assert len(matching) <= 1
        if matching:
            assert determine_tier(people, TIERS).tier is matching[0]


def test_no_tiers_declared():
    with pytest.raises(NoMatchingTier):
        determine_tier(2, [])
