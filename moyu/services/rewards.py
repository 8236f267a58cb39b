"""
Reward Resolver — decides whether a finished break hooks a fish, and which.

Longer breaks raise the catch chance (30% floor, +1% per minute, 60% cap)
and unlock rarer tiers. All randomness comes from an injectable
``random.Random`` so tests can pin the draws.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from moyu.data.models import Reward, RewardTier

BASE_CATCH_CHANCE = 0.30
CATCH_CHANCE_PER_MINUTE = 0.01
MAX_CATCH_CHANCE = 0.60

# Declaration order matters: the weighted walk visits tiers in this order.
FISH_TIERS: List[RewardTier] = [
    RewardTier("Common", "🐟", "Minnow", 60, 0),
    RewardTier("Rare", "🐠", "Goldfish", 25, 5),
    RewardTier("Epic", "🐡", "Pufferfish", 12, 15),
    RewardTier("Legendary", "🦈", "Shark", 3, 30),
]


def catch_chance(duration_seconds: float) -> float:
    minutes = max(duration_seconds, 0.0) / 60.0
    return min(BASE_CATCH_CHANCE + minutes * CATCH_CHANCE_PER_MINUTE, MAX_CATCH_CHANCE)


def eligible_tiers(
    duration_seconds: float, tiers: Sequence[RewardTier] = FISH_TIERS
) -> List[RewardTier]:
    minutes = duration_seconds / 60.0
    return [t for t in tiers if t.minimum_duration_minutes <= minutes]


class RewardResolver:
    """Stateless apart from its random source."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        tiers: Sequence[RewardTier] = FISH_TIERS,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.rng = rng or random.Random()
        self.tiers = list(tiers)
        self._now = now

    def resolve(self, duration_seconds: float) -> Optional[Reward]:
        """Roll once for a catch. Returns None when nothing bites."""
        if self.rng.random() > catch_chance(duration_seconds):
            return None

        available = eligible_tiers(duration_seconds, self.tiers)
        if not available:
            # Only reachable with a custom table lacking a zero-minimum tier
            return None
        tier = self._pick_tier(available)
        caught_at = self._now()

        return Reward(
            id=int(caught_at.timestamp() * 1000),
            rarity_label=tier.rarity_label,
            display_glyph=tier.display_glyph,
            name=tier.name,
            caught_at=caught_at,
            session_duration_seconds=duration_seconds,
        )

    def _pick_tier(self, available: List[RewardTier]) -> RewardTier:
        total_weight = sum(t.catch_weight for t in available)
        roll = self.rng.random() * total_weight
        for tier in available:
            roll -= tier.catch_weight
            if roll <= 0:
                return tier
        return available[0]
