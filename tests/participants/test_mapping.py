import uuid

import pytest

from participants.models import Participant
from participants.services import (
    confirm_mappings,
    normalize_name,
    remove_mapping,
    suggest_mappings,
)


def _user(id, nom, prenom, email="", role="COMMERCIAL"):
    return {"id": id, "nom": nom, "prenom": prenom, "email": email, "role": role}


@pytest.fixture
def unmapped(db):
    return Participant.objects.create(
        kind=Participant.Kind.COMMERCIAL,
        last_name="Lefèvre",
        first_name="Jean-Marc",
        email="jm.lefevre@test.com",
    )


def test_normalize_name_folds_accents_and_punctuation():
    assert normalize_name("  Lefèvre ") == "lefevre"
    assert normalize_name("Jean-Marc") == "jeanmarc"
    assert normalize_name(None) == ""


@pytest.mark.django_db
class TestSuggestMappings:
    def test_exact_name_match(self, unmapped):
        suggestions = suggest_mappings([_user(7, "LEFEVRE", "jean marc")])

        suggestion = suggestions[0]
        assert suggestion.external_id == "7"
        assert suggestion.confidence == 90
        assert suggestion.already_mapped is False

    def test_first_name_prefix_match(self, unmapped):
        suggestion = suggest_mappings([_user(7, "Lefevre", "Jean")])[0]

        assert suggestion.confidence == 70

    def test_email_match_wins(self, unmapped):
        suggestion = suggest_mappings([_user(8, "Autre", "Nom", email="JM.Lefevre@test.com")])[0]

        assert suggestion.external_id == "8"
        assert suggestion.confidence == 95

    def test_only_same_kind_is_considered(self, unmapped):
        suggestion = suggest_mappings([_user(7, "Lefevre", "Jean-Marc", role="MANAGER")])[0]

        assert suggestion.external_id is None
        assert suggestion.confidence is None

    def test_already_mapped_participants_are_reported(self, commercial):
        suggestion = suggest_mappings([_user(101, "Martin", "Lucas")])[0]

        assert suggestion.already_mapped is True
        assert suggestion.external_id == "101"
        assert suggestion.external_name == "Lucas Martin"

    def test_inactive_participants_are_ignored(self, unmapped):
        unmapped.is_active = False
        unmapped.save()

        assert suggest_mappings([_user(7, "Lefevre", "Jean-Marc")]) == []


@pytest.mark.django_db
class TestConfirmMappings:
    def test_writes_external_ids(self, unmapped):
        result = confirm_mappings([(unmapped.pk, "7")])

        assert result == {"mapped": 1, "skipped": 0}
        unmapped.refresh_from_db()
        assert unmapped.external_id == "7"

    def test_duplicate_external_id_is_skipped(self, unmapped, commercial):
        result = confirm_mappings([(unmapped.pk, commercial.external_id)])

        assert result == {"mapped": 0, "skipped": 1}
        unmapped.refresh_from_db()
        assert unmapped.external_id is None

    def test_unknown_participant_is_skipped(self):
        assert confirm_mappings([(uuid.uuid4(), "7")]) == {"mapped": 0, "skipped": 1}

    def test_remove_mapping(self, commercial):
        assert remove_mapping(commercial.pk) is True
        commercial.refresh_from_db()
        assert commercial.external_id is None
        assert Participant.objects.evaluable().count() == 0

    def test_remove_mapping_of_unknown_or_malformed_id(self):
        assert remove_mapping(uuid.uuid4()) is False
        assert remove_mapping("pas-un-uuid") is False


@pytest.mark.django_db
class TestBlankExternalId:
    def test_blank_is_stored_as_null(self):
        first = Participant.objects.create(kind=Participant.Kind.COMMERCIAL, last_name="Un", external_id="")
        second = Participant.objects.create(kind=Participant.Kind.MANAGER, last_name="Deux", external_id="  ")

        first.refresh_from_db()
        second.refresh_from_db()
        assert (first.external_id, second.external_id) == (None, None)
        assert not Participant.objects.mapped().exists()

    def test_identifier_is_trimmed(self):
        participant = Participant.objects.create(
            kind=Participant.Kind.COMMERCIAL, last_name="Trois", external_id=" 303 "
        )

        participant.refresh_from_db()
        assert participant.external_id == "303"


@pytest.mark.django_db
def test_admin_action_removes_mappings(admin_client, commercial, manager):
    admin_client.post(
        "/admin/participants/participant/",
        {"action": "remove_mappings", "_selected_action": [commercial.pk, manager.pk]},
    )

    assert not Participant.objects.mapped().exists()
