from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from catalog.models import Offer, ProductKey
from contracts.models import ValidatedContract
from core.periods import period_keys
from participants.models import Participant
from prospecting.models import DoorStatusEvent


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_user(
        username="admin",
        email="admin@test.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture
def staff_client(client, staff_user):
    client.force_login(staff_user)
    return client


@pytest.fixture
def commercial(db):
    return Participant.objects.create(
        kind=Participant.Kind.COMMERCIAL,
        last_name="Martin",
        first_name="Lucas",
        email="lucas.martin@test.com",
        external_id="101",
    )


@pytest.fixture
def second_commercial(db):
    return Participant.objects.create(
        kind=Participant.Kind.COMMERCIAL,
        last_name="Bernard",
        first_name="Chloe",
        email="chloe.bernard@test.com",
        external_id="102",
    )


@pytest.fixture
def manager(db):
    return Participant.objects.create(
        kind=Participant.Kind.MANAGER,
        last_name="Durand",
        first_name="Sophie",
        email="sophie.durand@test.com",
        external_id="201",
    )


@pytest.fixture
def mobile_offer(db):
    return Offer.objects.create(
        external_id="OF-1",
        name="Forfait Mobile 100Go",
        category="Telecom",
        supplier="Orange",
        base_price=Decimal("100.00"),
        product_key=ProductKey.MOBILE,
    )


@pytest.fixture
def energy_offer(db):
    return Offer.objects.create(
        external_id="OF-2",
        name="Offre Electricite Verte",
        category="Energie",
        supplier="Engie",
        base_price=Decimal("150.00"),
        product_key=ProductKey.ELEC_GAZ,
    )


@pytest.fixture
def make_contract(db):
    counter = {"value": 0}

    def _make(participant, validated_at, offer=None, **kwargs):
        counter["value"] += 1
        keys = period_keys(timezone.localtime(validated_at))
        return ValidatedContract.objects.create(
            external_contract_id=kwargs.pop("external_contract_id", f"C-{counter['value']}"),
            external_participant_id=(participant.external_id if participant else None) or "999",
            participant=participant,
            external_offer_id=offer.external_id if offer else "",
            offer=offer,
            validated_at=validated_at,
            period_day=keys.day,
            period_week=keys.week,
            period_month=keys.month,
            period_quarter=keys.quarter,
            period_year=keys.year,
            synced_at=timezone.now(),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_event(db):
    def _make(participant, door_ref, status, occurred_at):
        return DoorStatusEvent.objects.create(
            participant=participant,
            door_ref=door_ref,
            status=status,
            occurred_at=occurred_at,
        )

    return _make


@pytest.fixture
def seeded_badges(db):
    from gamification.services import seed_badge_catalog

    return seed_badge_catalog()
