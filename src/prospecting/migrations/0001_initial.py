import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("participants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DoorStatusEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("door_ref", models.CharField(db_index=True, max_length=64, verbose_name="porte")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("NON_VISITE", "Non visitee"),
                            ("CONTRAT_SIGNE", "Contrat signe"),
                            ("REFUS", "Refus"),
                            ("RENDEZ_VOUS_PRIS", "Rendez-vous pris"),
                            ("ABSENT", "Absent"),
                            ("ARGUMENTE", "Argumente"),
                            ("NECESSITE_REPASSAGE", "Necessite un repassage"),
                        ],
                        max_length=24,
                        verbose_name="statut",
                    ),
                ),
                ("occurred_at", models.DateTimeField(db_index=True, verbose_name="date")),
                ("comment", models.TextField(blank=True, default="", verbose_name="commentaire")),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="door_events",
                        to="participants.participant",
                        verbose_name="participant",
                    ),
                ),
            ],
            options={
                "verbose_name": "historique de porte",
                "verbose_name_plural": "historiques de portes",
                "ordering": ["occurred_at"],
                "indexes": [
                    models.Index(fields=["participant", "occurred_at"], name="door_event_participant_at_idx"),
                    models.Index(fields=["participant", "status"], name="door_event_participant_st_idx"),
                ],
            },
        ),
    ]
