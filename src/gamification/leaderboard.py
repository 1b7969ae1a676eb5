"""Leaderboard computation engine."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from core.periods import validate_key

from .tiers import resolve_tier

logger = logging.getLogger(__name__)

# RankSnapshot.PeriodType -> period granularity
PERIOD_GRANULARITIES = {
    "DAILY": "day",
    "WEEKLY": "week",
    "MONTHLY": "month",
    "QUARTERLY": "quarter",
    "YEARLY": "year",
}


def assign_ranks(entries):
    """Competition ranks driven by points only.

    ``entries`` must already be sorted (points desc, contracts desc). An entry
    takes its 1-based position as rank only when its points are strictly
    below the previous entry's, so ``[500, 500, 300]`` ranks ``[1, 1, 3]``
    whatever the contract counts.
    """
    current_rank = 1
    for position, entry in enumerate(entries, start=1):
        if position > 1 and entry["points"] < entries[position - 2]["points"]:
            current_rank = position
        entry["rank"] = current_rank
    return entries


def _round_points(total) -> int:
    return int(Decimal(total or 0).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RankingEngine:
    """Score, rank and snapshot every active, mapped participant for a period."""

    def compute(self, period_type: str, period_key: str) -> dict:
        """Compute rankings, resolve tiers, record rank deltas, persist."""
        from gamification.models import RankSnapshot
        from participants.models import Participant
        from contracts.models import ValidatedContract

        try:
            granularity = PERIOD_GRANULARITIES[period_type]
        except KeyError as exc:
            raise ValueError(f"Unknown period type: {period_type!r}") from exc
        validate_key(granularity, period_key)

        participants = list(Participant.objects.evaluable())
        scores = {
            row["participant_id"]: row
            for row in ValidatedContract.objects.filter(participant__in=participants)
            .in_period(granularity, period_key)
            .values("participant_id")
            .annotate(total=Sum("offer__base_price"), contracts=Count("id"))
        }

        entries = []
        for participant in participants:
            row = scores.get(participant.pk, {})
            entries.append(
                {
                    "participant": participant,
                    "points": _round_points(row.get("total")),
                    "contracts": row.get("contracts", 0),
                }
            )
        entries.sort(key=lambda e: (-e["points"], -e["contracts"], str(e["participant"].pk)))
        assign_ranks(entries)

        # Load previous snapshots for rank-change detection
        previous_ranks = dict(
            RankSnapshot.objects.filter(
                period_type=period_type,
                period_key=period_key,
            ).values_list("participant_id", "rank")
        )

        now = timezone.now()
        for entry in entries:
            participant = entry["participant"]
            previous_rank = previous_ranks.get(participant.pk)
            delta = previous_rank - entry["rank"] if previous_rank is not None else None  # positive = moved up
            tier = resolve_tier(entry["points"])
            RankSnapshot.objects.update_or_create(
                participant=participant,
                period_type=period_type,
                period_key=period_key,
                defaults={
                    "rank": entry["rank"],
                    "points": entry["points"],
                    "contracts_count": entry["contracts"],
                    "computed_at": now,
                    "metadata": {
                        "previousRank": previous_rank,
                        "delta": delta,
                        "tier": tier.key,
                    },
                },
            )

        logger.info(
            "Ranking %s/%s: %d participants ranked",
            period_type,
            period_key,
            len(entries),
            extra={"stage": "ranking", "period_key": period_key},
        )
        return {"period_type": period_type, "period_key": period_key, "computed": len(entries)}
