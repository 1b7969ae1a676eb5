import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("external_id", models.CharField(max_length=64, unique=True, verbose_name="identifiant externe")),
                ("name", models.CharField(max_length=255, verbose_name="nom")),
                ("description", models.TextField(blank=True, default="", verbose_name="description")),
                ("category", models.CharField(blank=True, default="", max_length=120, verbose_name="categorie")),
                ("supplier", models.CharField(blank=True, default="", max_length=120, verbose_name="fournisseur")),
                (
                    "base_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="prix de base"
                    ),
                ),
                (
                    "product_key",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("MOBILE", "Mobile"),
                            ("FIBRE", "Fibre"),
                            ("DEPANSSUR", "Dépanssur"),
                            ("ELEC_GAZ", "Électricité/Gaz"),
                            ("CONCIERGERIE", "Conciergerie"),
                            ("MONDIAL_TV", "Mondial TV"),
                            ("ASSURANCE", "Assurance"),
                        ],
                        db_index=True,
                        max_length=20,
                        null=True,
                        verbose_name="famille produit",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
                ("synced_at", models.DateTimeField(blank=True, null=True, verbose_name="synchronise le")),
            ],
            options={
                "verbose_name": "offre",
                "verbose_name_plural": "offres",
                "ordering": ["category", "name"],
            },
        ),
    ]
