"""Participants: field-sales agents and managers taking part in the gamification."""
from django.db import models

from core.models import TimeStampedModel


class ParticipantQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def mapped(self):
        return self.filter(external_id__isnull=False).exclude(external_id="")

    def evaluable(self):
        """Active participants linked to an identity of the contract feed."""
        return self.active().mapped()

    def field_sales(self):
        return self.filter(kind=Participant.Kind.COMMERCIAL)


class Participant(TimeStampedModel):
    """One identity (kind + id) shared by ingestion, evaluation and ranking.

    ``external_id`` is the participant-mapping table: the identifier of the same
    person in the contract feed. Unmapped participants are legal and simply
    ignored by the engines.
    """

    class Kind(models.TextChoices):
        COMMERCIAL = "COMMERCIAL", "Commercial"
        MANAGER = "MANAGER", "Manager"

    kind = models.CharField("type", max_length=20, choices=Kind.choices)
    last_name = models.CharField("nom", max_length=120)
    first_name = models.CharField("prenom", max_length=120, blank=True)
    email = models.EmailField("e-mail", blank=True)
    external_id = models.CharField(
        "identifiant externe",
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Identifiant du participant dans le flux de contrats.",
    )
    is_active = models.BooleanField("actif", default=True)

    objects = ParticipantQuerySet.as_manager()

    class Meta:
        verbose_name = "participant"
        verbose_name_plural = "participants"
        ordering = ["kind", "last_name", "first_name"]
        indexes = [
            models.Index(fields=["kind", "is_active"], name="participant_kind_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.get_kind_display()})"

    def save(self, *args, **kwargs):
        # Blank means not mapped.
        self.external_id = (self.external_id or "").strip() or None
        super().save(*args, **kwargs)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_field_sales(self) -> bool:
        return self.kind == self.Kind.COMMERCIAL
