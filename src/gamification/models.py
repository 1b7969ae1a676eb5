"""Models for the gamification module (badges, awards, leaderboard snapshots)."""
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel

from .conditions import InvalidCondition, parse_condition

LIFETIME = "lifetime"


class BadgeDefinition(TimeStampedModel):
    """A badge rule. Deactivating it stops future evaluation, awards are kept."""

    class Category(models.TextChoices):
        PROGRESSION = "PROGRESSION", "Progression"
        PRODUIT = "PRODUIT", "Produit"
        PERFORMANCE = "PERFORMANCE", "Performance"
        TROPHEE = "TROPHEE", "Trophee"

    code = models.CharField("code", max_length=64, unique=True)
    name = models.CharField("nom", max_length=120)
    description = models.TextField("description", blank=True)
    category = models.CharField("categorie", max_length=20, choices=Category.choices)
    condition = models.JSONField("condition", default=dict)
    tier = models.PositiveSmallIntegerField("palier", default=0)
    icon_url = models.URLField("icone", blank=True)
    is_active = models.BooleanField("actif", default=True)

    class Meta:
        verbose_name = "badge"
        verbose_name_plural = "badges"
        ordering = ["category", "tier", "name"]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def clean(self) -> None:
        try:
            parse_condition(self.condition)
        except InvalidCondition as exc:
            raise ValidationError({"condition": str(exc)}) from exc

    @property
    def parsed_condition(self):
        return parse_condition(self.condition)


class Award(TimeStampedModel):
    """A badge earned by a participant for one period.

    ``period_key`` is ``"lifetime"`` for progression / product badges, a
    period key for the others.
    """

    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="awards",
        verbose_name="participant",
    )
    badge = models.ForeignKey(
        BadgeDefinition,
        on_delete=models.PROTECT,
        related_name="awards",
        verbose_name="badge",
    )
    period_key = models.CharField("periode", max_length=16)
    awarded_at = models.DateTimeField("attribue le", default=timezone.now)
    metadata = models.JSONField("details", default=dict, blank=True)

    class Meta:
        verbose_name = "badge attribue"
        verbose_name_plural = "badges attribues"
        constraints = [
            models.UniqueConstraint(
                fields=["participant", "badge", "period_key"],
                name="uniq_participant_badge_period",
            ),
        ]
        ordering = ["-awarded_at"]

    def __str__(self) -> str:
        return f"{self.badge.code} - {self.participant} ({self.period_key})"

    def clean(self) -> None:
        from gamification.services import validate_award_period

        if self.badge_id is None:
            return
        try:
            validate_award_period(self.badge, self.period_key)
        except ValueError as exc:
            raise ValidationError({"period_key": str(exc)}) from exc


class RankSnapshot(TimeStampedModel):
    """Leaderboard position of a participant for one period, overwritten on recompute."""

    class PeriodType(models.TextChoices):
        DAILY = "DAILY", "Jour"
        WEEKLY = "WEEKLY", "Semaine"
        MONTHLY = "MONTHLY", "Mois"
        QUARTERLY = "QUARTERLY", "Trimestre"
        YEARLY = "YEARLY", "Annee"

    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="rank_snapshots",
        verbose_name="participant",
    )
    period_type = models.CharField("type de periode", max_length=10, choices=PeriodType.choices)
    period_key = models.CharField("periode", max_length=10)
    rank = models.PositiveIntegerField("rang")
    points = models.PositiveIntegerField("points", default=0)
    contracts_count = models.PositiveIntegerField("contrats signes", default=0)
    computed_at = models.DateTimeField("calcule le", default=timezone.now)
    metadata = models.JSONField("details", default=dict, blank=True)

    class Meta:
        verbose_name = "classement"
        verbose_name_plural = "classements"
        constraints = [
            models.UniqueConstraint(
                fields=["participant", "period_type", "period_key"],
                name="uniq_participant_rank_period",
            ),
        ]
        indexes = [
            models.Index(fields=["period_type", "period_key", "rank"], name="rank_period_rank_idx"),
        ]
        ordering = ["period_type", "period_key", "rank"]

    def __str__(self) -> str:
        return f"#{self.rank} {self.participant} ({self.period_type} {self.period_key})"
