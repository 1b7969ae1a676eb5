"""Badge evaluation engine.

Every active badge is tested against every active, mapped participant. A
condition evaluator returns the metric values that justify the award (stored
as award metadata) or ``None``.
"""
from __future__ import annotations

import logging
from datetime import datetime

from django.utils import timezone

from participants.models import Participant

from . import conditions as c
from .badge_catalog import product_keys_for
from .context import EvaluationContext, EvaluationContextBuilder
from .models import LIFETIME, BadgeDefinition
from .services import award_badge, award_granularity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Condition evaluators
# ---------------------------------------------------------------------------

def _contracts_signed(condition: c.ContractsSigned, ctx: EvaluationContext):
    if condition.is_ranked:
        return None
    if ctx.total_contracts >= condition.threshold:
        return {"contrats": ctx.total_contracts, "threshold": condition.threshold}
    return None


def _product_contracts(condition: c.ProductContracts, ctx: EvaluationContext):
    if condition.is_ranked:
        return None
    keys = product_keys_for(condition.category)
    if not keys:
        return None
    count = sum(ctx.by_product.get(key, 0) for key in keys)
    if count >= condition.threshold:
        return {"categorie": condition.category, "contrats": count, "threshold": condition.threshold}
    return None


def _daily_max(attribute):
    def evaluate(condition, ctx: EvaluationContext):
        value = getattr(ctx, attribute)
        if value >= condition.threshold:
            return {"record": value, "threshold": condition.threshold}
        return None

    return evaluate


def _closing_rate(condition: c.ClosingRate, ctx: EvaluationContext):
    if condition.scope != c.SCOPE_MONTH or ctx.month_argued_events < 1:
        return None
    rate = ctx.month_signed_events / ctx.month_argued_events * 100
    if rate >= condition.threshold:
        return {
            "month": ctx.current_month,
            "signes": ctx.month_signed_events,
            "argumentes": ctx.month_argued_events,
            "rate": round(rate, 2),
        }
    return None


def _reengagement_conversions(condition: c.ReengagementConversions, ctx: EvaluationContext):
    if condition.scope != c.SCOPE_MONTH:
        return None
    if ctx.reengagement_conversions_month >= condition.threshold:
        return {"month": ctx.current_month, "repassages": ctx.reengagement_conversions_month}
    return None


def _reengagement_signatures(condition: c.ReengagementSignatures, ctx: EvaluationContext):
    if ctx.reengagement_signatures >= max(condition.threshold, 1):
        return {"repassages": ctx.reengagement_signatures}
    return None


def _best_bucket(counter, threshold):
    if not counter:
        return None
    bucket, count = max(counter.items(), key=lambda item: item[1])
    if count >= threshold:
        return bucket, count
    return None


def _daily_signatures(condition: c.DailySignatures, ctx: EvaluationContext):
    best = _best_bucket(ctx.by_day, condition.threshold)
    if best:
        return {"day": best[0], "contrats": best[1]}
    return None


def _weekly_signatures(condition: c.WeeklySignatures, ctx: EvaluationContext):
    best = _best_bucket(ctx.by_week, condition.threshold)
    if best:
        return {"week": best[0], "contrats": best[1]}
    return None


def _weekly_progression(condition: c.WeeklyProgression, ctx: EvaluationContext):
    if condition.scope != c.SCOPE_MONTH or condition.kind != "constant":
        return None
    weeks = sorted(ctx.month_weeks)
    if len(weeks) < 2:
        return None
    counts = [ctx.month_weeks[week] for week in weeks]
    if all(later > earlier for earlier, later in zip(counts, counts[1:])):
        return {"month": ctx.current_month, "weeks": dict(zip(weeks, counts))}
    return None


def _monthly_progression(condition: c.MonthlyProgression, ctx: EvaluationContext):
    months = sorted(ctx.by_month)
    if len(months) < 2:
        return None
    previous, last = ctx.by_month[months[-2]], ctx.by_month[months[-1]]
    if previous == 0:
        return {"from": months[-2], "to": months[-1], "improvement": None} if last > 0 else None
    improvement = (last - previous) / previous * 100
    if improvement >= condition.threshold:
        return {"from": months[-2], "to": months[-1], "improvement": round(improvement, 2)}
    return None


def _distinct_badges(condition: c.DistinctBadges, ctx: EvaluationContext):
    if ctx.distinct_badges >= condition.threshold:
        return {"badges": ctx.distinct_badges}
    return None


def _population_ranked(condition, ctx):
    # Owned by ComparativeEvaluator
    return None


EVALUATORS = {
    c.ContractsSigned.metric: _contracts_signed,
    c.ProductContracts.metric: _product_contracts,
    c.DailyArguments.metric: _daily_max("max_argued_day"),
    c.DailyProspectedDoors.metric: _daily_max("max_prospected_doors_day"),
    c.DailyDistinctDoors.metric: _daily_max("max_distinct_doors_day"),
    c.ClosingRate.metric: _closing_rate,
    c.ReengagementConversions.metric: _reengagement_conversions,
    c.ReengagementSignatures.metric: _reengagement_signatures,
    c.DailySignatures.metric: _daily_signatures,
    c.WeeklySignatures.metric: _weekly_signatures,
    c.WeeklyProgression.metric: _weekly_progression,
    c.MonthlyProgression.metric: _monthly_progression,
    c.DistinctBadges.metric: _distinct_badges,
    c.ConversionRate.metric: _population_ranked,
    c.TransformationRatio.metric: _population_ranked,
}


def evaluate_condition(condition: c.Condition, ctx: EvaluationContext):
    return EVALUATORS[condition.metric](condition, ctx)


def period_key_for(badge, condition: c.Condition, ctx: EvaluationContext) -> str:
    """Period an award of ``badge`` is recorded under."""
    granularity = award_granularity(badge, condition)
    if granularity is None:
        return LIFETIME
    return getattr(ctx, f"current_{granularity}")


class EvaluationEngine:
    """Evaluate per-participant badge conditions and award what is earned."""

    def __init__(self, now: datetime | None = None) -> None:
        self.builder = EvaluationContextBuilder(now=now)

    def load_badges(self):
        """Active badges with their parsed condition; malformed ones are skipped."""
        badges = []
        for badge in BadgeDefinition.objects.filter(is_active=True):
            try:
                badges.append((badge, badge.parsed_condition))
            except c.InvalidCondition as exc:
                logger.warning("Badge %s skipped: %s", badge.code, exc, extra={"badge_code": badge.code})
        return badges

    def evaluate_all(self) -> dict:
        started = timezone.now()
        badges = self.load_badges()
        participants = Participant.objects.evaluable()

        evaluated = 0
        awarded = 0
        skipped = 0
        for participant in participants:
            result = self.evaluate_participant(participant, badges)
            evaluated += 1
            awarded += result["awarded"]
            skipped += result["skipped"]

        duration_ms = int((timezone.now() - started).total_seconds() * 1000)
        logger.info(
            "Badge evaluation: %d participants, %d awarded, %d already awarded",
            evaluated,
            awarded,
            skipped,
            extra={"stage": "evaluation", "duration_ms": duration_ms},
        )
        return {"evaluated": evaluated, "awarded": awarded, "skipped": skipped}

    def evaluate_participant(self, participant, badges=None) -> dict:
        if badges is None:
            badges = self.load_badges()
        ctx = self.builder.build(participant)

        awarded = 0
        skipped = 0
        # Badges counting held badges are evaluated last.
        ordered = sorted(badges, key=lambda item: isinstance(item[1], c.DistinctBadges))
        for badge, condition in ordered:
            metadata = evaluate_condition(condition, ctx)
            if metadata is None:
                continue
            period_key = period_key_for(badge, condition, ctx)
            metadata = {**metadata, "evaluatedAt": ctx.now.isoformat(), "auto": True}
            result = award_badge(participant, badge, period_key, metadata)
            if result.awarded:
                awarded += 1
                # The meta-badge counts badges held, keep it current within the run.
                ctx.distinct_badges = participant.awards.values("badge_id").distinct().count()
            else:
                skipped += 1
        return {"awarded": awarded, "skipped": skipped}
