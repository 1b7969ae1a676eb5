"""Point bands shown next to a leaderboard position."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PointTier:
    key: str
    label: str
    min_points: int


POINT_TIERS = (
    PointTier("BRONZE", "Bronze", 0),
    PointTier("SILVER", "Silver", 100),
    PointTier("GOLD", "Gold", 250),
    PointTier("PLATINUM", "Platinum", 500),
    PointTier("DIAMOND", "Diamond", 1000),
    PointTier("MASTER", "Master", 2500),
    PointTier("GRANDMASTER", "Grandmaster", 5000),
    PointTier("LEGEND", "Legend", 10000),
)


def resolve_tier(points: int) -> PointTier:
    """Highest band whose floor is <= ``points``."""
    if points < 0:
        raise ValueError(f"Points must be non-negative, got {points}")
    current = POINT_TIERS[0]
    for tier in POINT_TIERS[1:]:
        if points < tier.min_points:
            break
        current = tier
    return current


def next_tier(points: int) -> tuple[PointTier | None, int]:
    """Next band to reach and the points still missing (``(None, 0)`` at the top)."""
    for tier in POINT_TIERS:
        if tier.min_points > points:
            return tier, tier.min_points - points
    return None, 0
