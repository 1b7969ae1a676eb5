"""Population-ranked badges.

These badges are not earned against a threshold but by a leaderboard
position over every active, mapped participant:

- quarterly trophies (one winner per trophy, field sales win ties)
- monthly top-N on validated contracts
- weekly conversion rate (contracts / argued doors, field sales only)
- monthly transformation ratio (contracts / prospected doors, field sales only)
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from django.db.models import Count
from django.utils import timezone

from contracts.models import ValidatedContract
from core.periods import month_range, validate_key, week_range
from participants.models import Participant
from prospecting.models import DoorStatus, DoorStatusEvent

from . import conditions as c
from .badge_catalog import product_keys_for
from .models import BadgeDefinition
from .services import award_badge

logger = logging.getLogger(__name__)

# Field sales come first when two entries are otherwise equal.
_KIND_ORDER = {Participant.Kind.COMMERCIAL: 0, Participant.Kind.MANAGER: 1}


@dataclass
class RankedEntry:
    participant: Participant
    contracts: int
    denominator: int = 0
    rate: float = 0.0


def _aware_range(bounds):
    start, end = bounds
    return timezone.make_aware(start), timezone.make_aware(end)


class ComparativeEvaluator:
    """Award the badges owned by a leaderboard position."""

    def _ranked_badges(self, category, metrics, scope=None):
        badges = []
        for badge in BadgeDefinition.objects.filter(category=category, is_active=True):
            try:
                condition = badge.parsed_condition
            except c.InvalidCondition as exc:
                logger.warning("Badge %s skipped: %s", badge.code, exc, extra={"badge_code": badge.code})
                continue
            if metrics is not None and condition.metric not in metrics:
                continue
            if scope is not None and condition.scope != scope:
                continue
            if not condition.is_ranked:
                continue
            badges.append((badge, condition))
        return badges

    def _contract_counts(self, granularity, key, product_keys=None, field_sales_only=False):
        queryset = ValidatedContract.objects.resolved().in_period(granularity, key)
        if product_keys is not None:
            queryset = queryset.filter(offer__product_key__in=product_keys)
        if field_sales_only:
            queryset = queryset.filter(participant__kind=Participant.Kind.COMMERCIAL)
        return Counter(
            dict(
                queryset.values("participant_id")
                .annotate(total=Count("id"))
                .values_list("participant_id", "total")
            )
        )

    def _award_positions(self, badges, leaderboard, period_key, describe) -> dict:
        awarded = 0
        skipped = 0
        for badge, condition in badges:
            if condition.rank > len(leaderboard):
                continue
            entry = leaderboard[condition.rank - 1]
            metadata = {**describe(entry), "rank": condition.rank, "auto": True}
            result = award_badge(entry.participant, badge, period_key, metadata)
            if result.awarded:
                awarded += 1
            else:
                skipped += 1
        return {"awarded": awarded, "skipped": skipped}

    # ------------------------------------------------------------------
    # Trophies
    # ------------------------------------------------------------------

    def evaluate_trophies(self, quarter: str) -> dict:
        validate_key("quarter", quarter)
        awarded = 0
        skipped = 0
        for badge, condition in self._ranked_badges(
            BadgeDefinition.Category.TROPHEE,
            (c.ContractsSigned.metric, c.ProductContracts.metric),
        ):
            winner = self.trophy_winner(condition, quarter)
            if winner is None:
                continue
            participant, count = winner
            result = award_badge(
                participant,
                badge,
                quarter,
                {"quarter": quarter, "contrats": count, "auto": True},
            )
            if result.awarded:
                awarded += 1
            else:
                skipped += 1

        logger.info(
            "Trophies %s: %d awarded, %d already awarded",
            quarter,
            awarded,
            skipped,
            extra={"stage": "trophies", "period_key": quarter},
        )
        return {"awarded": awarded, "skipped": skipped}

    def trophy_winner(self, condition, quarter):
        """``(participant, count)`` of the quarter's leader, or None."""
        product_keys = None
        if isinstance(condition, c.ProductContracts):
            product_keys = product_keys_for(condition.category)
            if not product_keys:
                return None
        counts = self._contract_counts("quarter", quarter, product_keys)
        if not counts:
            return None

        participants = Participant.objects.in_bulk(list(counts))
        leaders = {}
        for participant_id, count in counts.items():
            participant = participants[participant_id]
            current = leaders.get(participant.kind)
            if current is None or (-count, str(participant_id)) < (-current[1], str(current[0].pk)):
                leaders[participant.kind] = (participant, count)

        field_leader = leaders.get(Participant.Kind.COMMERCIAL)
        manager_leader = leaders.get(Participant.Kind.MANAGER)
        if field_leader is None:
            return manager_leader
        if manager_leader is None or field_leader[1] >= manager_leader[1]:
            return field_leader
        return manager_leader

    # ------------------------------------------------------------------
    # Monthly top-N on contracts
    # ------------------------------------------------------------------

    def evaluate_performance_ranking(self, month: str) -> dict:
        validate_key("month", month)
        badges = self._ranked_badges(
            BadgeDefinition.Category.PERFORMANCE,
            (c.ContractsSigned.metric,),
            scope=c.SCOPE_MONTH,
        )
        if not badges:
            return {"awarded": 0, "skipped": 0}

        leaderboard = self.performance_leaderboard(month)
        result = self._award_positions(
            badges,
            leaderboard,
            month,
            lambda entry: {"month": month, "contrats": entry.contracts},
        )
        logger.info(
            "Performance ranking %s: %d awarded, %d already awarded",
            month,
            result["awarded"],
            result["skipped"],
            extra={"stage": "performance_ranking", "period_key": month},
        )
        return result

    def performance_leaderboard(self, month: str) -> list[RankedEntry]:
        counts = self._contract_counts("month", month)
        participants = Participant.objects.in_bulk(list(counts))
        entries = [RankedEntry(participants[pid], count) for pid, count in counts.items()]
        entries.sort(
            key=lambda e: (-e.contracts, _KIND_ORDER[e.participant.kind], str(e.participant.pk))
        )
        return entries

    # ------------------------------------------------------------------
    # Rates (field sales only)
    # ------------------------------------------------------------------

    def _rate_leaderboard(self, granularity, key, events) -> list[RankedEntry]:
        denominators = Counter(
            dict(
                events.filter(
                    participant__kind=Participant.Kind.COMMERCIAL,
                    participant__is_active=True,
                    participant__external_id__isnull=False,
                )
                .values("participant_id")
                .annotate(total=Count("id"))
                .values_list("participant_id", "total")
            )
        )
        counts = self._contract_counts(granularity, key, field_sales_only=True)
        participants = Participant.objects.evaluable().field_sales().in_bulk(
            [pid for pid, n in denominators.items() if n > 0]
        )

        entries = []
        for pid, participant in participants.items():
            contracts = counts.get(pid, 0)
            entries.append(
                RankedEntry(
                    participant,
                    contracts,
                    denominator=denominators[pid],
                    rate=contracts / denominators[pid],
                )
            )
        entries.sort(key=lambda e: (-e.rate, -e.contracts, str(e.participant.pk)))
        return entries

    def conversion_leaderboard(self, week: str) -> list[RankedEntry]:
        start, end = _aware_range(week_range(week))
        events = DoorStatusEvent.objects.between(start, end).filter(status=DoorStatus.ARGUMENTE)
        return self._rate_leaderboard("week", week, events)

    def transformation_leaderboard(self, month: str) -> list[RankedEntry]:
        start, end = _aware_range(month_range(month))
        events = DoorStatusEvent.objects.between(start, end).prospected()
        return self._rate_leaderboard("month", month, events)

    def _evaluate_rate(self, metric, scope, leaderboard, period_key, stage, denominator_name) -> dict:
        badges = self._ranked_badges(BadgeDefinition.Category.PERFORMANCE, (metric,), scope=scope)
        # A zero rate is not an achievement.
        winners = [entry for entry in leaderboard if entry.contracts > 0]
        result = self._award_positions(
            badges,
            winners,
            period_key,
            lambda entry: {
                "period": period_key,
                "contrats": entry.contracts,
                denominator_name: entry.denominator,
                "rate": round(entry.rate * 100, 2),
            },
        )
        logger.info(
            "%s %s: %d ranked, %d awarded, %d already awarded",
            stage,
            period_key,
            len(leaderboard),
            result["awarded"],
            result["skipped"],
            extra={"stage": stage, "period_key": period_key},
        )
        return result

    def evaluate_conversion_ranking(self, week: str) -> dict:
        leaderboard = self.conversion_leaderboard(week)
        return self._evaluate_rate(
            c.ConversionRate.metric, c.SCOPE_WEEK, leaderboard, week, "conversion_ranking", "argumentes"
        )

    def evaluate_transformation_ranking(self, month: str) -> dict:
        leaderboard = self.transformation_leaderboard(month)
        return self._evaluate_rate(
            c.TransformationRatio.metric, c.SCOPE_MONTH, leaderboard, month, "transformation_ranking", "portes"
        )
