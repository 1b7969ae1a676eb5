"""Models for the contracts app."""
from django.db import models

from core.models import TimeStampedModel

# Period granularity -> contract column holding the bucket key.
PERIOD_FIELDS = {
    "day": "period_day",
    "week": "period_week",
    "month": "period_month",
    "quarter": "period_quarter",
    "year": "period_year",
}


class ValidatedContractQuerySet(models.QuerySet):
    def resolved(self):
        """Contracts attributed to an active, mapped participant."""
        return self.filter(
            participant__isnull=False,
            participant__is_active=True,
            participant__external_id__isnull=False,
        )

    def in_period(self, granularity, key):
        return self.filter(**{PERIOD_FIELDS[granularity]: key})


class ValidatedContract(TimeStampedModel):
    """
    One sale validated in the contract feed.

    The row is keyed by ``external_contract_id`` and overwritten on every
    sync. ``participant`` stays empty while the feed identity has no mapping;
    such contracts are kept for a later backfill but ignored by the engines.
    """

    external_contract_id = models.CharField("identifiant contrat", max_length=64, unique=True)
    external_prospect_id = models.CharField("identifiant prospect", max_length=64, blank=True, default="")
    external_participant_id = models.CharField("identifiant commercial externe", max_length=64, db_index=True)
    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="contracts",
        verbose_name="participant",
    )
    external_offer_id = models.CharField("identifiant offre externe", max_length=64, blank=True, default="")
    offer = models.ForeignKey(
        "catalog.Offer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="contracts",
        verbose_name="offre",
    )
    validated_at = models.DateTimeField("date de validation")
    signed_at = models.DateTimeField("date de signature", null=True, blank=True)

    period_day = models.CharField("jour", max_length=10, db_index=True)
    period_week = models.CharField("semaine", max_length=8, db_index=True)
    period_month = models.CharField("mois", max_length=7, db_index=True)
    period_quarter = models.CharField("trimestre", max_length=7, db_index=True)
    period_year = models.CharField("annee", max_length=4, db_index=True)

    metadata = models.JSONField("donnees du flux", default=dict, blank=True)
    synced_at = models.DateTimeField("synchronise le")

    objects = ValidatedContractQuerySet.as_manager()

    class Meta:
        verbose_name = "contrat valide"
        verbose_name_plural = "contrats valides"
        ordering = ["-validated_at"]
        indexes = [
            models.Index(fields=["participant", "period_month"], name="contract_participant_month_idx"),
            models.Index(fields=["participant", "period_quarter"], name="contract_participant_qtr_idx"),
        ]

    def __str__(self):
        return f"Contrat {self.external_contract_id} ({self.period_day})"
