"""
Administrative operations on badges, awards and rankings.

Shared by the evaluation engines, the REST API, the Django admin and the
management commands. Uniqueness problems are reported through the return
value, never raised to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.periods import InvalidPeriodKey, validate_key

from . import conditions as c
from .models import LIFETIME, Award, BadgeDefinition, RankSnapshot

logger = logging.getLogger("prowin")


@dataclass
class AwardResult:
    awarded: bool
    award: Award | None


@dataclass
class SeedResult:
    created: int
    updated: int
    total: int
    version: int


# Condition scope -> granularity of the award period key.
_SCOPE_GRANULARITIES = {
    c.SCOPE_WEEK: "week",
    c.SCOPE_MONTH: "month",
    c.SCOPE_QUARTER: "quarter",
}


def award_granularity(badge, condition) -> str | None:
    """Granularity of the period ``badge`` is awarded for, None for ``lifetime``."""
    category = badge.category
    if category in (BadgeDefinition.Category.PROGRESSION, BadgeDefinition.Category.PRODUIT):
        return None
    if category == BadgeDefinition.Category.TROPHEE:
        return "quarter"
    if condition.scope == c.SCOPE_RECORD:
        return None
    return _SCOPE_GRANULARITIES.get(condition.scope, "day")


def validate_award_period(badge, period_key) -> str:
    """Return ``period_key`` if an award of ``badge`` may be stored under it.

    Raises ``InvalidPeriodKey`` otherwise, and ``InvalidCondition`` when the
    badge condition itself is malformed.
    """
    granularity = award_granularity(badge, badge.parsed_condition)
    if granularity is None:
        if period_key != LIFETIME:
            raise InvalidPeriodKey(
                f"{badge.code} s'attribue sur la periode {LIFETIME!r}, pas {period_key!r}"
            )
        return period_key
    return validate_key(granularity, period_key)


def award_badge(participant, badge, period_key, metadata=None) -> AwardResult:
    """Create the (participant, badge, period) award unless it already exists.

    ``awarded`` is False when the award was already there; the stored
    metadata is left untouched in that case.
    """
    try:
        with transaction.atomic():
            award, created = Award.objects.get_or_create(
                participant=participant,
                badge=badge,
                period_key=period_key,
                defaults={
                    "metadata": metadata or {},
                    "awarded_at": timezone.now(),
                },
            )
    except IntegrityError:
        # Lost a race against a concurrent evaluation of the same triple.
        award = Award.objects.filter(
            participant=participant, badge=badge, period_key=period_key
        ).first()
        return AwardResult(awarded=False, award=award)

    if created:
        logger.info(
            "Badge %s awarded to %s (%s)",
            badge.code,
            participant,
            period_key,
            extra={"badge_code": badge.code, "period_key": period_key,
                   "participant_id": str(participant.pk)},
        )
    return AwardResult(awarded=created, award=award)


def revoke_award(award_id) -> bool:
    """Delete an award. Returns False when it does not exist."""
    try:
        deleted, _ = Award.objects.filter(pk=award_id).delete()
    except ValidationError:
        return False
    if deleted:
        logger.info("Award %s revoked", award_id)
    else:
        logger.warning("Award %s not found, nothing revoked", award_id)
    return bool(deleted)


def recompute_ranking(period_type, period_key) -> dict:
    """Recompute and persist the leaderboard of one period."""
    from gamification.leaderboard import RankingEngine

    return RankingEngine().compute(period_type, period_key)


@transaction.atomic
def seed_badge_catalog() -> SeedResult:
    """Upsert every catalog badge by code.

    Existing badges keep their identity (and so their awards); mutable fields
    are refreshed. Badges deactivated by an administrator stay inactive.
    """
    from gamification.badge_catalog import CATALOG_VERSION, build_catalog

    specs = build_catalog()
    created = 0
    updated = 0
    for spec in specs:
        _, was_created = BadgeDefinition.objects.update_or_create(
            code=spec.code,
            defaults={
                "name": spec.name,
                "description": spec.description,
                "category": spec.category,
                "condition": spec.condition.to_payload(),
                "tier": spec.tier,
            },
        )
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info(
        "Badge catalog v%d seeded: %d created, %d updated (%d total)",
        CATALOG_VERSION,
        created,
        updated,
        len(specs),
    )
    return SeedResult(created=created, updated=updated, total=len(specs), version=CATALOG_VERSION)


def set_badge_active(badge, active: bool) -> BadgeDefinition:
    if badge.is_active != active:
        badge.is_active = active
        badge.save(update_fields=["is_active", "updated_at"])
        logger.info("Badge %s %s", badge.code, "activated" if active else "deactivated")
    return badge


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------

def awards_for_participant(participant):
    return (
        Award.objects.filter(participant=participant)
        .select_related("badge")
        .order_by("-awarded_at")
    )


def leaderboard(period_type, period_key):
    return (
        RankSnapshot.objects.filter(period_type=period_type, period_key=period_key)
        .select_related("participant")
        .order_by("rank", "-contracts_count")
    )
