"""
Contract ingestion.

The feed returns prospects, each carrying subscriptions, each carrying
contracts::

    prospect.commercialId                      -> Participant.external_id
    prospect.Souscription[].offreId            -> Offer.external_id
    prospect.Souscription[].contrats[].statut  == settings.WINLEADPLUS_VALIDATED_STATUS
    prospect.Souscription[].contrats[].dateValidation -> period keys

Every pass upserts by external contract id, so re-running it on the same
batch never creates new rows.
"""
import logging
from datetime import datetime, time

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from catalog.models import Offer
from core.periods import period_keys
from participants.models import Participant

from .models import ValidatedContract

logger = logging.getLogger("prowin")


def parse_timestamp(value) -> datetime | None:
    """Parse a feed timestamp into an aware datetime; ``None`` when unusable."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip().replace("Z", "+00:00")
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            return None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _as_key(value) -> str:
    return "" if value is None else str(value)


def _is_records(value) -> bool:
    """Missing nesting is empty; anything else must be a list."""
    return not value or isinstance(value, list)


def _records(value) -> list:
    return value if isinstance(value, list) else []


class ContractIngestor:
    """Reconciles a batch of feed prospects into the ``ValidatedContract`` table."""

    def __init__(self, validated_status=None):
        self.validated_status = validated_status or settings.WINLEADPLUS_VALIDATED_STATUS
        self.participant_map = {}
        self.offer_map = {}

    def load_mappings(self):
        self.participant_map = dict(
            Participant.objects.mapped().values_list("external_id", "id")
        )
        self.offer_map = dict(Offer.objects.values_list("external_id", "id"))

    def ingest(self, prospects) -> dict:
        """
        Upsert every validated contract found in ``prospects``.

        Returns::

            {"created": int, "updated": int, "skipped": int, "total": int}
        """
        self.load_mappings()
        created = 0
        updated = 0
        skipped = 0
        total = 0

        for prospect in _records(prospects):
            if not isinstance(prospect, dict):
                continue
            subscriptions = prospect.get("Souscription")
            if not _is_records(subscriptions):
                logger.warning("Prospect %s ignored: Souscription is not a list", prospect.get("id"))
                total += 1
                skipped += 1
                continue
            for subscription in _records(subscriptions):
                if not isinstance(subscription, dict):
                    continue
                contracts = subscription.get("contrats")
                if not _is_records(contracts):
                    logger.warning("Subscription %s ignored: contrats is not a list", subscription.get("id"))
                    total += 1
                    skipped += 1
                    continue
                for contract in _records(contracts):
                    total += 1
                    outcome = self._ingest_contract(contract, prospect, subscription)
                    if outcome == "created":
                        created += 1
                    elif outcome == "updated":
                        updated += 1
                    else:
                        skipped += 1

        logger.info(
            "Contract sync: %d created, %d updated, %d skipped (%d total)",
            created,
            updated,
            skipped,
            total,
        )
        return {"created": created, "updated": updated, "skipped": skipped, "total": total}

    def _ingest_contract(self, contract, prospect, subscription) -> str | None:
        if not isinstance(contract, dict) or not contract.get("id"):
            return None
        if contract.get("statut") != self.validated_status:
            return None
        external_participant_id = _as_key(prospect.get("commercialId"))
        if not external_participant_id:
            return None
        validated_at = parse_timestamp(contract.get("dateValidation"))
        if validated_at is None:
            return None

        keys = period_keys(timezone.localtime(validated_at))
        external_offer_id = _as_key(subscription.get("offreId"))
        offer_data = subscription.get("offre") if isinstance(subscription.get("offre"), dict) else {}

        defaults = {
            "external_prospect_id": _as_key(prospect.get("idProspect") or prospect.get("id")),
            "external_participant_id": external_participant_id,
            "participant_id": self.participant_map.get(external_participant_id),
            "external_offer_id": external_offer_id,
            "offer_id": self.offer_map.get(external_offer_id) if external_offer_id else None,
            "validated_at": validated_at,
            "signed_at": parse_timestamp(contract.get("dateSignature")),
            "period_day": keys.day,
            "period_week": keys.week,
            "period_month": keys.month,
            "period_quarter": keys.quarter,
            "period_year": keys.year,
            "metadata": {
                "prospectStatut": prospect.get("statutProspect"),
                "offreNom": offer_data.get("nom"),
                "offreCategorie": offer_data.get("categorie"),
                "offreFournisseur": offer_data.get("fournisseur"),
            },
            "synced_at": timezone.now(),
        }
        _, was_created = ValidatedContract.objects.update_or_create(
            external_contract_id=_as_key(contract["id"]),
            defaults=defaults,
        )
        return "created" if was_created else "updated"


def sync_contracts(client) -> dict:
    """Pull prospects through ``client`` and ingest their validated contracts.

    ``UpstreamError`` raised by the client propagates to the caller.
    """
    prospects = client.get_prospects()
    return ContractIngestor().ingest(prospects)


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------

def contracts_for_participant(participant, granularity=None, key=None):
    """Validated contracts of ``participant``, newest first, optionally for one period."""
    queryset = ValidatedContract.objects.filter(participant=participant).select_related("offer")
    if granularity is not None:
        queryset = queryset.in_period(granularity, key)
    return queryset.order_by("-validated_at")
