import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("participants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ValidatedContract",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "external_contract_id",
                    models.CharField(max_length=64, unique=True, verbose_name="identifiant contrat"),
                ),
                (
                    "external_prospect_id",
                    models.CharField(blank=True, default="", max_length=64, verbose_name="identifiant prospect"),
                ),
                (
                    "external_participant_id",
                    models.CharField(db_index=True, max_length=64, verbose_name="identifiant commercial externe"),
                ),
                (
                    "external_offer_id",
                    models.CharField(blank=True, default="", max_length=64, verbose_name="identifiant offre externe"),
                ),
                ("validated_at", models.DateTimeField(verbose_name="date de validation")),
                ("signed_at", models.DateTimeField(blank=True, null=True, verbose_name="date de signature")),
                ("period_day", models.CharField(db_index=True, max_length=10, verbose_name="jour")),
                ("period_week", models.CharField(db_index=True, max_length=8, verbose_name="semaine")),
                ("period_month", models.CharField(db_index=True, max_length=7, verbose_name="mois")),
                ("period_quarter", models.CharField(db_index=True, max_length=7, verbose_name="trimestre")),
                ("period_year", models.CharField(db_index=True, max_length=4, verbose_name="annee")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="donnees du flux")),
                ("synced_at", models.DateTimeField(verbose_name="synchronise le")),
                (
                    "offer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="contracts",
                        to="catalog.offer",
                        verbose_name="offre",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="contracts",
                        to="participants.participant",
                        verbose_name="participant",
                    ),
                ),
            ],
            options={
                "verbose_name": "contrat valide",
                "verbose_name_plural": "contrats valides",
                "ordering": ["-validated_at"],
                "indexes": [
                    models.Index(fields=["participant", "period_month"], name="contract_participant_month_idx"),
                    models.Index(fields=["participant", "period_quarter"], name="contract_participant_qtr_idx"),
                ],
            },
        ),
    ]
