from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from catalog.models import Offer
from core.periods import InvalidPeriodKey
from gamification.leaderboard import RankingEngine, assign_ranks
from gamification.models import RankSnapshot
from participants.models import Participant


def _at(year, month, day, hour=10, minute=0):
    return timezone.make_aware(datetime(year, month, day, hour, minute))


def _contracts(make_contract, participant, count, offer, start=None):
    start = start or _at(2026, 2, 2)
    for offset in range(count):
        make_contract(participant, start + timedelta(hours=offset), offer)


def _snapshot(participant, period_key="2026-02"):
    return RankSnapshot.objects.get(participant=participant, period_type="MONTHLY", period_key=period_key)


class TestAssignRanks:
    def test_equal_points_share_a_rank(self):
        entries = [
            {"points": 500, "contracts": 5},
            {"points": 500, "contracts": 3},
            {"points": 300, "contracts": 9},
        ]

        assert [e["rank"] for e in assign_ranks(entries)] == [1, 1, 3]

    def test_strictly_decreasing_points(self):
        entries = [{"points": p, "contracts": 0} for p in (30, 20, 10)]

        assert [e["rank"] for e in assign_ranks(entries)] == [1, 2, 3]

    def test_empty(self):
        assert assign_ranks([]) == []


@pytest.mark.django_db
class TestRankingEngine:
    def test_scores_ranks_and_tiers(
        self, commercial, second_commercial, manager, mobile_offer, energy_offer, make_contract
    ):
        _contracts(make_contract, commercial, 5, mobile_offer)
        _contracts(make_contract, second_commercial, 2, energy_offer)

        result = RankingEngine().compute("MONTHLY", "2026-02")

        assert result == {"period_type": "MONTHLY", "period_key": "2026-02", "computed": 3}
        first = _snapshot(commercial)
        assert (first.rank, first.points, first.contracts_count) == (1, 500, 5)
        assert first.metadata == {"previousRank": None, "delta": None, "tier": "PLATINUM"}
        second = _snapshot(second_commercial)
        assert (second.rank, second.points, second.metadata["tier"]) == (2, 300, "GOLD")
        last = _snapshot(manager)
        assert (last.rank, last.points, last.contracts_count) == (3, 0, 0)
        assert last.metadata["tier"] == "BRONZE"

    def test_only_evaluable_participants_are_ranked(self, commercial, mobile_offer, make_contract):
        Participant.objects.create(kind=Participant.Kind.COMMERCIAL, last_name="Sans Lien")
        Participant.objects.create(
            kind=Participant.Kind.COMMERCIAL, last_name="Parti", external_id="999", is_active=False
        )
        _contracts(make_contract, commercial, 1, mobile_offer)

        RankingEngine().compute("MONTHLY", "2026-02")

        assert list(RankSnapshot.objects.values_list("participant_id", flat=True)) == [commercial.pk]

    def test_contracts_without_offer_count_but_score_nothing(self, commercial, make_contract):
        make_contract(commercial, _at(2026, 2, 2))

        RankingEngine().compute("MONTHLY", "2026-02")

        snapshot = _snapshot(commercial)
        assert (snapshot.points, snapshot.contracts_count) == (0, 1)

    def test_points_are_rounded_half_up(self, commercial, make_contract):
        half = Offer.objects.create(external_id="OF-H", name="Option", base_price=Decimal("10.50"))
        flat = Offer.objects.create(external_id="OF-F", name="Option bis", base_price=Decimal("10.00"))
        make_contract(commercial, _at(2026, 2, 2), half)
        make_contract(commercial, _at(2026, 2, 3), flat)

        RankingEngine().compute("MONTHLY", "2026-02")

        assert _snapshot(commercial).points == 21

    def test_recompute_records_rank_change(
        self, commercial, second_commercial, manager, mobile_offer, energy_offer, make_contract
    ):
        _contracts(make_contract, commercial, 5, mobile_offer)
        _contracts(make_contract, second_commercial, 2, energy_offer)
        engine = RankingEngine()
        engine.compute("MONTHLY", "2026-02")

        _contracts(make_contract, second_commercial, 3, energy_offer, start=_at(2026, 2, 10))
        engine.compute("MONTHLY", "2026-02")

        assert RankSnapshot.objects.count() == 3
        overtaken = _snapshot(commercial)
        assert (overtaken.rank, overtaken.metadata["previousRank"], overtaken.metadata["delta"]) == (2, 1, -1)
        leader = _snapshot(second_commercial)
        assert (leader.rank, leader.points) == (1, 750)
        assert (leader.metadata["previousRank"], leader.metadata["delta"]) == (2, 1)
        assert _snapshot(manager).metadata["delta"] == 0

    def test_each_period_type_reads_its_own_key(self, commercial, mobile_offer, make_contract):
        make_contract(commercial, _at(2026, 2, 3), mobile_offer)
        engine = RankingEngine()

        engine.compute("DAILY", "2026-02-03")
        engine.compute("WEEKLY", "2026-W06")
        engine.compute("YEARLY", "2025")

        points = dict(RankSnapshot.objects.values_list("period_type", "points"))
        assert points == {"DAILY": 100, "WEEKLY": 100, "YEARLY": 0}

    def test_invalid_period_key(self):
        with pytest.raises(InvalidPeriodKey):
            RankingEngine().compute("MONTHLY", "2026-13")

    def test_key_must_match_period_type(self):
        with pytest.raises(InvalidPeriodKey):
            RankingEngine().compute("WEEKLY", "2026-02")

    def test_unknown_period_type(self):
        with pytest.raises(ValueError, match="Unknown period type"):
            RankingEngine().compute("HOURLY", "2026-02")
