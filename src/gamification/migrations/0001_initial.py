import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("participants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="BadgeDefinition",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("code", models.CharField(max_length=64, unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=120, verbose_name="nom")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("PROGRESSION", "Progression"),
                            ("PRODUIT", "Produit"),
                            ("PERFORMANCE", "Performance"),
                            ("TROPHEE", "Trophee"),
                        ],
                        max_length=20,
                        verbose_name="categorie",
                    ),
                ),
                ("condition", models.JSONField(default=dict, verbose_name="condition")),
                ("tier", models.PositiveSmallIntegerField(default=0, verbose_name="palier")),
                ("icon_url", models.URLField(blank=True, verbose_name="icone")),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
            ],
            options={
                "verbose_name": "badge",
                "verbose_name_plural": "badges",
                "ordering": ["category", "tier", "name"],
            },
        ),
        migrations.CreateModel(
            name="Award",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("period_key", models.CharField(max_length=16, verbose_name="periode")),
                ("awarded_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="attribue le")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="details")),
                (
                    "badge",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="awards",
                        to="gamification.badgedefinition",
                        verbose_name="badge",
                    ),
                ),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="awards",
                        to="participants.participant",
                        verbose_name="participant",
                    ),
                ),
            ],
            options={
                "verbose_name": "badge attribue",
                "verbose_name_plural": "badges attribues",
                "ordering": ["-awarded_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("participant", "badge", "period_key"),
                        name="uniq_participant_badge_period",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RankSnapshot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "period_type",
                    models.CharField(
                        choices=[
                            ("DAILY", "Jour"),
                            ("WEEKLY", "Semaine"),
                            ("MONTHLY", "Mois"),
                            ("QUARTERLY", "Trimestre"),
                            ("YEARLY", "Annee"),
                        ],
                        max_length=10,
                        verbose_name="type de periode",
                    ),
                ),
                ("period_key", models.CharField(max_length=10, verbose_name="periode")),
                ("rank", models.PositiveIntegerField(verbose_name="rang")),
                ("points", models.PositiveIntegerField(default=0, verbose_name="points")),
                ("contracts_count", models.PositiveIntegerField(default=0, verbose_name="contrats signes")),
                ("computed_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="calcule le")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="details")),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rank_snapshots",
                        to="participants.participant",
                        verbose_name="participant",
                    ),
                ),
            ],
            options={
                "verbose_name": "classement",
                "verbose_name_plural": "classements",
                "ordering": ["period_type", "period_key", "rank"],
                "indexes": [
                    models.Index(fields=["period_type", "period_key", "rank"], name="rank_period_rank_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("participant", "period_type", "period_key"),
                        name="uniq_participant_rank_period",
                    ),
                ],
            },
        ),
    ]
