import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "kind",
                    models.CharField(
                        choices=[("COMMERCIAL", "Commercial"), ("MANAGER", "Manager")],
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                ("last_name", models.CharField(max_length=120, verbose_name="nom")),
                ("first_name", models.CharField(blank=True, max_length=120, verbose_name="prenom")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="e-mail")),
                (
                    "external_id",
                    models.CharField(
                        blank=True,
                        help_text="Identifiant du participant dans le flux de contrats.",
                        max_length=64,
                        null=True,
                        unique=True,
                        verbose_name="identifiant externe",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
            ],
            options={
                "verbose_name": "participant",
                "verbose_name_plural": "participants",
                "ordering": ["kind", "last_name", "first_name"],
                "indexes": [
                    models.Index(fields=["kind", "is_active"], name="participant_kind_active_idx"),
                ],
            },
        ),
    ]
