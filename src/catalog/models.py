"""Models for the catalog app (offers sold by the field-sales force)."""
from decimal import Decimal

from django.db import models

from core.models import TimeStampedModel


class ProductKey(models.TextChoices):
    """Internal product families used by the badge rules."""

    MOBILE = "MOBILE", "Mobile"
    FIBRE = "FIBRE", "Fibre"
    DEPANSSUR = "DEPANSSUR", "Dépanssur"
    ELEC_GAZ = "ELEC_GAZ", "Électricité/Gaz"
    CONCIERGERIE = "CONCIERGERIE", "Conciergerie"
    MONDIAL_TV = "MONDIAL_TV", "Mondial TV"
    ASSURANCE = "ASSURANCE", "Assurance"


class Offer(TimeStampedModel):
    """An offer of the contract feed.

    ``external_id`` is the product-mapping table; ``base_price`` drives the
    leaderboard points and ``product_key`` the per-product badges.
    """

    external_id = models.CharField("identifiant externe", max_length=64, unique=True)
    name = models.CharField("nom", max_length=255)
    description = models.TextField("description", blank=True, default="")
    category = models.CharField("categorie", max_length=120, blank=True, default="")
    supplier = models.CharField("fournisseur", max_length=120, blank=True, default="")
    base_price = models.DecimalField(
        "prix de base",
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )
    product_key = models.CharField(
        "famille produit",
        max_length=20,
        choices=ProductKey.choices,
        null=True,
        blank=True,
        db_index=True,
    )
    is_active = models.BooleanField("actif", default=True)
    synced_at = models.DateTimeField("synchronise le", null=True, blank=True)

    class Meta:
        verbose_name = "offre"
        verbose_name_plural = "offres"
        ordering = ["category", "name"]

    def __str__(self):
        return f"{self.name} ({self.supplier})" if self.supplier else self.name

    @property
    def points(self) -> Decimal:
        """Leaderboard value of one contract on this offer (missing price -> 0)."""
        return self.base_price if self.base_price is not None else Decimal("0")
