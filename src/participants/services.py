"""Participant <-> contract-feed identity mapping.

Suggestions compare normalized names (accents and punctuation removed) and
e-mail addresses of internal participants against the users exposed by the
contract feed. Confirmed pairs are written to ``Participant.external_id``.
"""
from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Iterable

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from participants.models import Participant

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 50
PREFERRED_EMAIL_DOMAIN = "@winleadplus.com"


@dataclass
class MappingSuggestion:
    participant: Participant
    external_id: str | None
    external_name: str = ""
    external_email: str = ""
    confidence: int | None = None
    already_mapped: bool = False


def normalize_name(value: str | None) -> str:
    cleaned = unicodedata.normalize("NFKD", (value or "").strip().lower())
    cleaned = "".join(ch for ch in cleaned if not unicodedata.combining(ch))
    return "".join(ch for ch in cleaned if ch.isascii() and ch.isalnum())


def _score(participant: Participant, user: dict) -> int:
    last = normalize_name(participant.last_name)
    first = normalize_name(participant.first_name)
    user_last = normalize_name(user.get("nom"))
    user_first = normalize_name(user.get("prenom"))

    confidence = 0
    if last == user_last and first == user_first:
        confidence = 90
    elif last == user_last and (user_first.startswith(first) or first.startswith(user_first)):
        confidence = 70

    email = (participant.email or "").lower()
    user_email = (user.get("email") or "").lower()
    if email and user_email and email == user_email:
        confidence = 95
    return confidence


def _best_match(participant: Participant, users: list[dict]) -> tuple[dict, int] | None:
    best_user = None
    best_confidence = 0
    for user in users:
        confidence = _score(participant, user)
        prefers_domain = (user.get("email") or "").endswith(PREFERRED_EMAIL_DOMAIN)
        if confidence > best_confidence or (
            best_user is not None and confidence == best_confidence and prefers_domain
        ):
            best_user = user
            best_confidence = confidence
    if best_user is None or best_confidence < MIN_CONFIDENCE:
        return None
    return best_user, best_confidence


def _display_name(user: dict) -> str:
    return f"{(user.get('prenom') or '').strip()} {(user.get('nom') or '').strip()}".strip()


def suggest_mappings(external_users: Iterable[dict]) -> list[MappingSuggestion]:
    """Propose an external identity for every active participant.

    External users are only matched against participants of the same kind.
    """
    users_by_kind: dict[str, list[dict]] = {}
    for user in external_users:
        users_by_kind.setdefault(user.get("role"), []).append(user)

    suggestions = []
    for participant in Participant.objects.active():
        candidates = users_by_kind.get(participant.kind, [])
        if participant.external_id:
            matched = next(
                (u for u in candidates if str(u.get("id")) == participant.external_id),
                {},
            )
            suggestions.append(
                MappingSuggestion(
                    participant=participant,
                    external_id=participant.external_id,
                    external_name=_display_name(matched) if matched else "",
                    external_email=matched.get("email") or "",
                    confidence=100,
                    already_mapped=True,
                )
            )
            continue

        match = _best_match(participant, candidates)
        if match is None:
            suggestions.append(MappingSuggestion(participant=participant, external_id=None))
            continue
        user, confidence = match
        suggestions.append(
            MappingSuggestion(
                participant=participant,
                external_id=str(user.get("id")),
                external_name=_display_name(user),
                external_email=user.get("email") or "",
                confidence=confidence,
            )
        )
    return suggestions


def confirm_mappings(entries: Iterable[tuple[str, str]]) -> dict:
    """Write ``(participant_id, external_id)`` pairs. Conflicts are skipped."""
    mapped = 0
    skipped = 0
    for participant_id, external_id in entries:
        try:
            with transaction.atomic():
                updated = Participant.objects.filter(pk=participant_id).update(
                    external_id=external_id or None,
                )
        except (IntegrityError, ValidationError) as exc:
            logger.warning(
                "Mapping rejected participant=%s external_id=%s: %s",
                participant_id,
                external_id,
                exc,
            )
            skipped += 1
            continue
        if updated:
            mapped += 1
        else:
            skipped += 1

    logger.info("Participant mapping: %d mapped, %d skipped", mapped, skipped)
    return {"mapped": mapped, "skipped": skipped}


def remove_mapping(participant_id) -> bool:
    """Clear the external id of a participant. False when it does not exist."""
    try:
        updated = Participant.objects.filter(pk=participant_id).update(external_id=None)
    except ValidationError:
        return False
    if updated:
        logger.info("Participant mapping removed for %s", participant_id)
    return bool(updated)
