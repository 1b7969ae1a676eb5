"""
Service functions for the catalog app.

Synchronises the offer table with the contract feed and guesses the internal
product family of each offer from its wording.
"""
import logging
import unicodedata
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from .models import Offer, ProductKey

logger = logging.getLogger("prowin")

# ---------------------------------------------------------------------------
# Keyword table, checked in order (the first family matching wins)
# ---------------------------------------------------------------------------
PRODUCT_KEYWORDS = [
    (ProductKey.FIBRE, ("fibre", "fiber")),
    (ProductKey.MOBILE, ("mobile", "telephonie", "forfait", "sim")),
    (ProductKey.DEPANSSUR, ("depanssur", "depannage", "assistance")),
    (ProductKey.ELEC_GAZ, ("energie", "electricite", "elec", "gaz")),
    (ProductKey.CONCIERGERIE, ("conciergerie",)),
    (ProductKey.MONDIAL_TV, ("mondial tv", "divertissement", "television", "tv")),
    (ProductKey.ASSURANCE, ("assurance", "sante", "mutuelle")),
]


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def infer_product_key(item: dict) -> str | None:
    """Guess a product family from the offer's name, category, description and supplier."""
    source = _fold(
        " ".join(
            str(item.get(field) or "")
            for field in ("nom", "categorie", "description", "fournisseur")
        )
    )
    for product_key, keywords in PRODUCT_KEYWORDS:
        if any(keyword in source for keyword in keywords):
            return product_key.value
    return None


def _to_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def sync_offers(items) -> dict:
    """
    Upsert offers coming from the feed, keyed by their external id.

    Items that are not objects, or miss an id, name, category or supplier,
    are skipped. A product family already set on an existing offer is never
    overwritten.

    Returns::

        {"created": int, "updated": int, "skipped": int, "total": int}
    """
    created = 0
    updated = 0
    skipped = 0
    now = timezone.now()

    for item in items or []:
        if not isinstance(item, dict):
            logger.warning("Offre ignoree (objet attendu): %s", str(item)[:100])
            skipped += 1
            continue
        if not all(item.get(field) for field in ("id", "nom", "categorie", "fournisseur")):
            logger.warning("Offre ignoree (champs manquants): %s", str(item)[:100])
            skipped += 1
            continue

        external_id = str(item["id"])
        defaults = {
            "name": str(item["nom"]).strip(),
            "description": item.get("description") or "",
            "category": str(item["categorie"]).strip(),
            "supplier": str(item["fournisseur"]).strip(),
            "base_price": _to_decimal(item.get("prix_base")),
            "is_active": item.get("isActive", True) is not False,
            "synced_at": now,
        }

        offer = Offer.objects.filter(external_id=external_id).first()
        if offer is None:
            Offer.objects.create(
                external_id=external_id,
                product_key=infer_product_key(item),
                **defaults,
            )
            created += 1
            continue

        for field, value in defaults.items():
            setattr(offer, field, value)
        if not offer.product_key:
            offer.product_key = infer_product_key(item)
        offer.save()
        updated += 1

    total = created + updated + skipped
    logger.info(
        "Offer sync: %d created, %d updated, %d skipped (%d total)",
        created,
        updated,
        skipped,
        total,
    )
    return {"created": created, "updated": updated, "skipped": skipped, "total": total}
