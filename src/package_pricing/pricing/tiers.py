"""Group size tier resolution."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from package_pricing.packages.models import GroupSizeTier
from package_pricing.pricing.errors import NoMatchingTier


@dataclass(frozen=True, slots=True)
class TierMatch:
    tier_index: int
    tier: GroupSizeTier


def determine_tier(people_count: int, tiers: Sequence[GroupSizeTier]) -> TierMatch:
    """Return the tier whose ``[min_people, max_people]`` contains ``people_count``.

    Tiers are declared sorted and non-overlapping, so the first containing tier is
    the only one. Party sizes below the lowest tier, above the highest, or in a gap
    between tiers raise :class:`NoMatchingTier`; there is no nearest-tier fallback.
    """
    for index, tier in enumerate(tiers):
        if tier.contains(people_count):
            return TierMatch(tier_index=index, tier=tier)
    raise NoMatchingTier(people_count, tiers=[tier.label for tier in tiers])
