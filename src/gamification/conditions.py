"""Typed badge conditions.

A badge rule is stored as a small JSON payload (``{"metric": ..., "threshold": ...}``).
Each metric maps to one frozen dataclass carrying only the parameters that
metric understands; ``parse_condition`` refuses anything else.

Payload keys::

    metric     metric name (required)
    threshold  non-negative integer
    scope      "month", "semaine", "record", "trimestre", ...
    ranking    "top1", "top2", ... (population-ranked badges)
    categorie  product category label (contratsProduit)
    type       "constant" (progressionHebdo)
"""
from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import ClassVar

SCOPE_MONTH = "month"
SCOPE_WEEK = "semaine"
SCOPE_RECORD = "record"
SCOPE_QUARTER = "trimestre"

_RANKING_RE = re.compile(r"^top(\d+)$")

# Payload key -> dataclass attribute.
_PAYLOAD_FIELDS = {
    "threshold": "threshold",
    "scope": "scope",
    "ranking": "rank",
    "categorie": "category",
    "type": "kind",
}
_ATTRIBUTE_KEYS = {attr: key for key, attr in _PAYLOAD_FIELDS.items()}


class InvalidCondition(ValueError):
    """A condition payload names an unknown metric or carries bad parameters."""


@dataclass(frozen=True)
class Condition:
    metric: ClassVar[str] = ""
    scope: str | None = None

    @property
    def is_ranked(self) -> bool:
        return getattr(self, "rank", None) is not None

    def to_payload(self) -> dict:
        payload = {"metric": self.metric}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None:
                continue
            key = _ATTRIBUTE_KEYS[field.name]
            payload[key] = f"top{value}" if field.name == "rank" else value
        return payload


@dataclass(frozen=True)
class ContractsSigned(Condition):
    metric: ClassVar[str] = "contratsSignes"
    threshold: int = 0
    rank: int | None = None


@dataclass(frozen=True)
class ProductContracts(Condition):
    metric: ClassVar[str] = "contratsProduit"
    category: str = ""
    threshold: int = 0
    rank: int | None = None


@dataclass(frozen=True)
class DailyArguments(Condition):
    metric: ClassVar[str] = "argumentationsParJour"
    threshold: int = 20


@dataclass(frozen=True)
class DailyProspectedDoors(Condition):
    metric: ClassVar[str] = "portesProspectesParJour"
    threshold: int = 100


@dataclass(frozen=True)
class DailyDistinctDoors(Condition):
    metric: ClassVar[str] = "portesParJour"
    threshold: int = 50


@dataclass(frozen=True)
class ClosingRate(Condition):
    metric: ClassVar[str] = "tauxClosing"
    scope: str | None = SCOPE_MONTH
    threshold: int = 30


@dataclass(frozen=True)
class ReengagementConversions(Condition):
    metric: ClassVar[str] = "repassageConversion"
    scope: str | None = SCOPE_MONTH
    threshold: int = 3


@dataclass(frozen=True)
class ReengagementSignatures(Condition):
    metric: ClassVar[str] = "signaturesRepassage"
    threshold: int = 1


@dataclass(frozen=True)
class DailySignatures(Condition):
    metric: ClassVar[str] = "signaturesParJour"
    threshold: int = 3


@dataclass(frozen=True)
class WeeklySignatures(Condition):
    metric: ClassVar[str] = "signaturesParSemaine"
    threshold: int = 5


@dataclass(frozen=True)
class WeeklyProgression(Condition):
    metric: ClassVar[str] = "progressionHebdo"
    scope: str | None = SCOPE_MONTH
    kind: str | None = "constant"


@dataclass(frozen=True)
class MonthlyProgression(Condition):
    metric: ClassVar[str] = "progressionMensuelle"
    threshold: int = 50


@dataclass(frozen=True)
class DistinctBadges(Condition):
    metric: ClassVar[str] = "badgesDistincts"
    threshold: int = 5


@dataclass(frozen=True)
class ConversionRate(Condition):
    metric: ClassVar[str] = "tauxConversion"
    scope: str | None = SCOPE_WEEK
    rank: int | None = 1


@dataclass(frozen=True)
class TransformationRatio(Condition):
    metric: ClassVar[str] = "ratioPortesSignatures"
    scope: str | None = SCOPE_MONTH
    rank: int | None = 1


CONDITION_TYPES = {
    cls.metric: cls
    for cls in (
        ContractsSigned,
        ProductContracts,
        DailyArguments,
        DailyProspectedDoors,
        DailyDistinctDoors,
        ClosingRate,
        ReengagementConversions,
        ReengagementSignatures,
        DailySignatures,
        WeeklySignatures,
        WeeklyProgression,
        MonthlyProgression,
        DistinctBadges,
        ConversionRate,
        TransformationRatio,
    )
}


def parse_rank(value) -> int:
    """``"top2"`` -> 2."""
    if isinstance(value, bool):
        raise InvalidCondition(f"Invalid ranking: {value!r}")
    if isinstance(value, int):
        rank = value
    else:
        match = _RANKING_RE.match(str(value or ""))
        if match is None:
            raise InvalidCondition(f"Invalid ranking: {value!r}")
        rank = int(match.group(1))
    if rank < 1:
        raise InvalidCondition(f"Ranking position must be >= 1, got {value!r}")
    return rank


def _parse_threshold(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCondition(f"Invalid threshold: {value!r}")
    if value < 0 or int(value) != value:
        raise InvalidCondition(f"Threshold must be a non-negative integer, got {value!r}")
    return int(value)


def parse_condition(payload) -> Condition:
    """Build the typed condition for a stored payload."""
    if not isinstance(payload, dict):
        raise InvalidCondition("Condition payload must be an object")
    metric = payload.get("metric")
    try:
        condition_type = CONDITION_TYPES[metric]
    except (KeyError, TypeError) as exc:
        raise InvalidCondition(f"Unknown metric: {metric!r}") from exc

    accepted = {field.name for field in fields(condition_type)}
    kwargs = {}
    for key, value in payload.items():
        if key == "metric" or value is None:
            continue
        attribute = _PAYLOAD_FIELDS.get(key)
        if attribute is None or attribute not in accepted:
            raise InvalidCondition(f"{metric}: unsupported parameter {key!r}")
        if attribute == "threshold":
            value = _parse_threshold(value)
        elif attribute == "rank":
            value = parse_rank(value)
        elif not isinstance(value, str):
            raise InvalidCondition(f"{metric}: {key} must be a string")
        kwargs[attribute] = value

    condition = condition_type(**kwargs)
    if isinstance(condition, ProductContracts) and not condition.category:
        raise InvalidCondition("contratsProduit requires a categorie")
    return condition
