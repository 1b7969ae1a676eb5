"""Models for the prospecting app (door-to-door status history)."""
from django.db import models

from core.models import TimeStampedModel


class DoorStatus(models.TextChoices):
    NON_VISITE = "NON_VISITE", "Non visitee"
    CONTRAT_SIGNE = "CONTRAT_SIGNE", "Contrat signe"
    REFUS = "REFUS", "Refus"
    RENDEZ_VOUS_PRIS = "RENDEZ_VOUS_PRIS", "Rendez-vous pris"
    ABSENT = "ABSENT", "Absent"
    ARGUMENTE = "ARGUMENTE", "Argumente"
    NECESSITE_REPASSAGE = "NECESSITE_REPASSAGE", "Necessite un repassage"


# Every status except the default one means somebody knocked on the door.
PROSPECTED_STATUSES = tuple(
    status for status in DoorStatus.values if status != DoorStatus.NON_VISITE
)


class DoorStatusEventQuerySet(models.QuerySet):
    def prospected(self):
        return self.filter(status__in=PROSPECTED_STATUSES)

    def between(self, start, end):
        return self.filter(occurred_at__gte=start, occurred_at__lte=end)


class DoorStatusEvent(TimeStampedModel):
    """One status change recorded by a participant on a door."""

    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="door_events",
        verbose_name="participant",
    )
    door_ref = models.CharField("porte", max_length=64, db_index=True)
    status = models.CharField("statut", max_length=24, choices=DoorStatus.choices)
    occurred_at = models.DateTimeField("date", db_index=True)
    comment = models.TextField("commentaire", blank=True, default="")

    objects = DoorStatusEventQuerySet.as_manager()

    class Meta:
        verbose_name = "historique de porte"
        verbose_name_plural = "historiques de portes"
        ordering = ["occurred_at"]
        indexes = [
            models.Index(fields=["participant", "occurred_at"], name="door_event_participant_at_idx"),
            models.Index(fields=["participant", "status"], name="door_event_participant_st_idx"),
        ]

    def __str__(self):
        return f"{self.door_ref} - {self.get_status_display()} ({self.occurred_at:%Y-%m-%d %H:%M})"
