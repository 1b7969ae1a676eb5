"""Declarative badge catalog.

The catalog is generated from a handful of tables; seeding upserts it by
``code`` (see ``gamification.services.seed_badge_catalog``). Bump
``CATALOG_VERSION`` whenever a definition changes.
"""
from __future__ import annotations

from dataclasses import dataclass

from catalog.models import ProductKey

from .conditions import (
    SCOPE_MONTH,
    SCOPE_QUARTER,
    SCOPE_RECORD,
    SCOPE_WEEK,
    ClosingRate,
    Condition,
    ContractsSigned,
    ConversionRate,
    DailyArguments,
    DailyDistinctDoors,
    DailyProspectedDoors,
    DailySignatures,
    DistinctBadges,
    MonthlyProgression,
    ProductContracts,
    ReengagementConversions,
    ReengagementSignatures,
    TransformationRatio,
    WeeklyProgression,
    WeeklySignatures,
)

CATALOG_VERSION = 1

PROGRESSION = "PROGRESSION"
PRODUIT = "PRODUIT"
PERFORMANCE = "PERFORMANCE"
TROPHEE = "TROPHEE"

# Category label used in badge conditions -> internal product keys.
CATEGORY_PRODUCT_KEYS = {
    "Télécom – Mobile": (ProductKey.MOBILE,),
    "Télécom – Fibre": (ProductKey.FIBRE,),
    "Énergie – Dépanssur": (ProductKey.DEPANSSUR,),
    "Énergie – Électricité/Gaz": (ProductKey.ELEC_GAZ,),
    "Conciergerie Privée": (ProductKey.CONCIERGERIE,),
    "Mondial TV": (ProductKey.MONDIAL_TV,),
    "Assurance – Mutuelle/Prévoyance/MRH": (ProductKey.ASSURANCE,),
    # Trophy groups
    "Énergie": (ProductKey.DEPANSSUR, ProductKey.ELEC_GAZ),
    "Télécom": (ProductKey.MOBILE, ProductKey.FIBRE),
    "Assurance": (ProductKey.ASSURANCE,),
}


def product_keys_for(category_label: str) -> tuple[str, ...]:
    """Product keys counted by a condition category (unknown label -> empty)."""
    return tuple(key.value for key in CATEGORY_PRODUCT_KEYS.get(category_label, ()))


@dataclass(frozen=True)
class BadgeSpec:
    code: str
    name: str
    description: str
    category: str
    condition: Condition
    tier: int = 0


PROGRESSION_TIERS = (
    (1, "Déclencheur"),
    (2, "Junior Performer"),
    (3, "Montée en puissance"),
    (5, "Déca Performer"),
    (10, "Objectif 10"),
    (20, "Vingtaine"),
    (50, "Cinquantaine"),
    (100, "Centurion"),
)

PRODUCT_TIERS = (
    (1, "Starter"),
    (2, "Duo"),
    (3, "Trio"),
    (5, "Pack 5"),
    (10, "Top 10"),
    (20, "Vingtaine"),
    (50, "Expert"),
    (100, "Légende"),
)

PRODUCTS = (
    (ProductKey.MOBILE, "Mobile", "Télécom – Mobile"),
    (ProductKey.FIBRE, "Fibre", "Télécom – Fibre"),
    (ProductKey.DEPANSSUR, "Dépanssur", "Énergie – Dépanssur"),
    (ProductKey.ELEC_GAZ, "Électricité/Gaz", "Énergie – Électricité/Gaz"),
    (ProductKey.CONCIERGERIE, "Conciergerie", "Conciergerie Privée"),
    (ProductKey.MONDIAL_TV, "Mondial TV", "Mondial TV"),
    (ProductKey.ASSURANCE, "Assurance", "Assurance – Mutuelle/Prévoyance/MRH"),
)

PERFORMANCE_BADGES = (
    ("PERF_RAPPEL_GAGNANT", "Rappel Gagnant",
     "Contrat signé suite à un repassage / relance",
     ReengagementSignatures(scope=SCOPE_RECORD, threshold=1)),
    ("PERF_REPASSAGE_PRO", "Pro du Repassage",
     "3 portes absentes converties en contrat signé dans le mois",
     ReengagementConversions(scope=SCOPE_MONTH, threshold=3)),
    ("PERF_MARATHON_PORTES", "Marathon des Portes",
     "100 portes prospectées en une seule journée",
     DailyProspectedDoors(scope=SCOPE_RECORD, threshold=100)),
    ("PERF_ARPENTEUR", "Arpenteur",
     "50 portes différentes visitées en une seule journée",
     DailyDistinctDoors(scope=SCOPE_RECORD, threshold=50)),
    ("PERF_ORATEUR", "Orateur",
     "20 argumentations en une seule journée",
     DailyArguments(scope=SCOPE_RECORD, threshold=20)),
    ("PERF_COUP_CHAPEAU", "Coup du Chapeau",
     "3 contrats validés dans une même journée",
     DailySignatures(scope=SCOPE_RECORD, threshold=3)),
    ("PERF_QUADRUPLE", "Quadruplé",
     "4 contrats validés dans une même journée",
     DailySignatures(scope=SCOPE_RECORD, threshold=4)),
    ("PERF_QUINTUPLE", "Quintuplé",
     "5 contrats validés dans une même journée",
     DailySignatures(scope=SCOPE_RECORD, threshold=5)),
    ("PERF_AS_TERRAIN", "As du terrain",
     "6 contrats validés ou plus dans une même journée",
     DailySignatures(scope=SCOPE_RECORD, threshold=6)),
    ("PERF_SERIAL_SIGNATAIRE", "Serial Signataire",
     "5 contrats validés sur une même semaine",
     WeeklySignatures(scope=SCOPE_RECORD, threshold=5)),
    ("PERF_CONVERSION_KING", "Conversion King",
     "Meilleur taux de conversion contrats validés / argumentations sur la semaine",
     ConversionRate(scope=SCOPE_WEEK, rank=1)),
    ("PERF_CHAMPION_TRANSFORMATION", "Champion de la Transformation",
     "Meilleur ratio contrats validés / portes prospectées sur le mois",
     TransformationRatio(scope=SCOPE_MONTH, rank=1)),
    ("PERF_CONSTANTE_PROGRESSION", "Constante Progression",
     "A progressé en contrats validés chaque semaine du mois",
     WeeklyProgression(scope=SCOPE_MONTH, kind="constant")),
    ("PERF_PROGRESSION_FULGURANTE", "Progression fulgurante",
     "Amélioration des contrats validés de plus de 50% d'un mois à l'autre",
     MonthlyProgression(scope=SCOPE_MONTH, threshold=50)),
    ("PERF_CONTRAT_OR", "Contrat d'Or",
     "Meilleur producteur en contrats validés sur le mois",
     ContractsSigned(scope=SCOPE_MONTH, rank=1)),
    ("PERF_VICE_CHAMPION", "Vice-champion",
     "Deuxième meilleur producteur du mois",
     ContractsSigned(scope=SCOPE_MONTH, rank=2)),
    ("PERF_TROISIEME_PLACE", "Troisième Place",
     "Troisième meilleur producteur du mois",
     ContractsSigned(scope=SCOPE_MONTH, rank=3)),
    ("PERF_GRAND_CHELEM", "Grand Chelem",
     "Obtenir au moins 5 badges différents",
     DistinctBadges(scope=SCOPE_RECORD, threshold=5)),
    ("PERF_CLOSER", "Closer",
     "Au moins 30% des argumentations du mois transformées en contrat",
     ClosingRate(scope=SCOPE_MONTH, threshold=30)),
)

TROPHY_BADGES = (
    ("TROPHEE_TOP_GLOBAL", "Top Producteur Global",
     "Meilleure performance globale trimestrielle (contrats validés)",
     ContractsSigned(scope=SCOPE_QUARTER, rank=1)),
    ("TROPHEE_TOP_ENERGIE", "Top Producteur Énergie",
     "Meilleur producteur Énergie du trimestre",
     ProductContracts(scope=SCOPE_QUARTER, category="Énergie", rank=1)),
    ("TROPHEE_TOP_TELECOM", "Top Producteur Télécom",
     "Meilleur producteur Télécom du trimestre",
     ProductContracts(scope=SCOPE_QUARTER, category="Télécom", rank=1)),
    ("TROPHEE_TOP_MTV", "Top Producteur MTV",
     "Meilleur producteur Mondial TV du trimestre",
     ProductContracts(scope=SCOPE_QUARTER, category="Mondial TV", rank=1)),
    ("TROPHEE_TOP_ASSURANCE", "Top Producteur Assurance",
     "Meilleur producteur Assurance du trimestre",
     ProductContracts(scope=SCOPE_QUARTER, category="Assurance", rank=1)),
)


def _progression_badges():
    for tier, (threshold, name) in enumerate(PROGRESSION_TIERS, start=1):
        yield BadgeSpec(
            code=f"PROGRESSION_{threshold}_CONTRATS",
            name=name,
            description=f"{threshold} client(s) signé(s) tous produits confondus",
            category=PROGRESSION,
            condition=ContractsSigned(threshold=threshold),
            tier=tier,
        )


def _product_badges():
    for product_key, label, category_label in PRODUCTS:
        for tier, (threshold, prefix) in enumerate(PRODUCT_TIERS, start=1):
            yield BadgeSpec(
                code=f"PRODUIT_{product_key.value}_{threshold}",
                name=f"{prefix} {label}",
                description=f"{threshold} contrat(s) {label.lower()} signé(s)",
                category=PRODUIT,
                condition=ProductContracts(category=category_label, threshold=threshold),
                tier=tier,
            )


def build_catalog() -> list[BadgeSpec]:
    """Every badge definition, in seeding order."""
    badges = list(_progression_badges())
    badges.extend(_product_badges())
    badges.extend(
        BadgeSpec(code, name, description, PERFORMANCE, condition)
        for code, name, description, condition in PERFORMANCE_BADGES
    )
    badges.extend(
        BadgeSpec(code, name, description, TROPHEE, condition)
        for code, name, description, condition in TROPHY_BADGES
    )
    return badges
