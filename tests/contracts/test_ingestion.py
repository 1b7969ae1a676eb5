from datetime import datetime, timezone as dt_timezone
from types import SimpleNamespace

import pytest

from contracts.models import ValidatedContract
from contracts.services import ContractIngestor, contracts_for_participant, parse_timestamp, sync_contracts


def _contract(id, date="2026-02-02T09:30:00Z", statut="Validé", **extra):
    return {"id": id, "statut": statut, "dateValidation": date, **extra}


def _prospect(commercial_id, *contracts, offre_id="OF-1", **extra):
    return {
        "id": 500,
        "commercialId": commercial_id,
        "statutProspect": "CLIENT",
        "Souscription": [
            {
                "offreId": offre_id,
                "offre": {"nom": "Forfait Mobile 100Go", "categorie": "Telecom", "fournisseur": "Orange"},
                "contrats": list(contracts),
            }
        ],
        **extra,
    }


class TestParseTimestamp:
    def test_iso_with_zulu_suffix(self):
        parsed = parse_timestamp("2026-02-02T09:30:00Z")
        assert parsed == datetime(2026, 2, 2, 9, 30, tzinfo=dt_timezone.utc)

    def test_plain_date_becomes_local_midnight(self):
        parsed = parse_timestamp("2026-02-02")
        assert parsed is not None
        assert parsed.tzinfo is not None
        assert parsed.hour == 0

    @pytest.mark.parametrize("value", [None, "", "demain", "2026-13-45"])
    def test_unusable_values(self, value):
        assert parse_timestamp(value) is None


@pytest.mark.django_db
class TestContractIngestor:
    def test_ingests_validated_contracts_with_period_keys(self, commercial, mobile_offer):
        result = ContractIngestor().ingest([_prospect(101, _contract(1))])

        assert result == {"created": 1, "updated": 0, "skipped": 0, "total": 1}
        contract = ValidatedContract.objects.get(external_contract_id="1")
        assert contract.participant == commercial
        assert contract.offer == mobile_offer
        assert contract.period_day == "2026-02-02"
        assert contract.period_week == "2026-W06"
        assert contract.period_month == "2026-02"
        assert contract.period_quarter == "2026-Q1"
        assert contract.period_year == "2026"
        assert contract.metadata["offreNom"] == "Forfait Mobile 100Go"
        assert contract.metadata["prospectStatut"] == "CLIENT"

    def test_same_batch_twice_is_idempotent(self, commercial, mobile_offer):
        batch = [_prospect(101, _contract(1), _contract(2))]
        ContractIngestor().ingest(batch)

        result = ContractIngestor().ingest(batch)

        assert result == {"created": 0, "updated": 2, "skipped": 0, "total": 2}
        assert ValidatedContract.objects.count() == 2

    def test_period_keys_use_local_time(self, commercial):
        # 23:30 UTC on Sunday is already Monday in Paris.
        ContractIngestor().ingest([_prospect(101, _contract(1, date="2026-02-01T23:30:00Z"))])

        contract = ValidatedContract.objects.get()
        assert contract.period_day == "2026-02-02"
        assert contract.period_week == "2026-W06"

    def test_skips_unusable_contracts(self, commercial):
        batch = [
            _prospect(
                101,
                _contract(1, statut="En attente"),
                _contract(2, date="pas une date"),
                _contract(None),
                "pas un dict",
                _contract(3),
            ),
            _prospect(None, _contract(4)),
            "pas un prospect",
            {"Souscription": None},
        ]

        result = ContractIngestor().ingest(batch)

        assert result == {"created": 1, "updated": 0, "skipped": 5, "total": 6}
        assert list(ValidatedContract.objects.values_list("external_contract_id", flat=True)) == ["3"]

    def test_malformed_nesting_does_not_abort_the_batch(self, commercial):
        bad_contracts = _prospect(101)
        bad_contracts["Souscription"][0]["contrats"] = {"id": 9}
        batch = [
            {"commercialId": "101", "Souscription": 7},
            bad_contracts,
            _prospect(101, _contract(1)),
        ]

        result = ContractIngestor().ingest(batch)

        assert result == {"created": 1, "updated": 0, "skipped": 2, "total": 3}
        assert list(ValidatedContract.objects.values_list("external_contract_id", flat=True)) == ["1"]

    def test_unmapped_identities_are_kept_unresolved(self, db):
        ContractIngestor().ingest([_prospect(999, _contract(1), offre_id="INCONNU")])

        contract = ValidatedContract.objects.get()
        assert contract.participant is None
        assert contract.offer is None
        assert contract.external_participant_id == "999"
        assert ValidatedContract.objects.resolved().count() == 0

    def test_later_mapping_resolves_on_next_sync(self, commercial):
        commercial.external_id = None
        commercial.save()
        batch = [_prospect(101, _contract(1))]
        ContractIngestor().ingest(batch)
        assert ValidatedContract.objects.get().participant is None

        commercial.external_id = "101"
        commercial.save()
        ContractIngestor().ingest(batch)

        assert ValidatedContract.objects.get().participant == commercial

    def test_validated_status_is_configurable(self, commercial):
        result = ContractIngestor(validated_status="VALIDATED").ingest(
            [_prospect(101, _contract(1), _contract(2, statut="VALIDATED"))]
        )

        assert result["created"] == 1
        assert ValidatedContract.objects.get().external_contract_id == "2"


@pytest.mark.django_db
def test_sync_contracts_reads_prospects_from_the_client(commercial):
    client = SimpleNamespace(get_prospects=lambda: [_prospect(101, _contract(1))])

    assert sync_contracts(client)["created"] == 1


@pytest.mark.django_db
def test_contracts_for_participant_filters_by_period(commercial):
    ContractIngestor().ingest(
        [_prospect(101, _contract(1), _contract(2, date="2026-03-10T10:00:00Z"))]
    )

    assert contracts_for_participant(commercial).count() == 2
    assert [c.external_contract_id for c in contracts_for_participant(commercial, "month", "2026-03")] == ["2"]
