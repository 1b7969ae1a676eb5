from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from core.periods import InvalidPeriodKey
from gamification.comparative import ComparativeEvaluator
from gamification.models import Award
from participants.models import Participant
from prospecting.models import DoorStatus


def _at(year, month, day, hour=10, minute=0):
    return timezone.make_aware(datetime(year, month, day, hour, minute))


def _contracts(make_contract, participant, count, start, offer=None):
    for offset in range(count):
        make_contract(participant, start + timedelta(days=offset), offer)


def _winner(code):
    return Award.objects.select_related("participant").get(badge__code=code).participant


@pytest.mark.django_db
class TestTrophies:
    def test_exact_tie_goes_to_field_sales(self, seeded_badges, commercial, manager, mobile_offer, make_contract):
        _contracts(make_contract, commercial, 10, _at(2026, 1, 5), mobile_offer)
        _contracts(make_contract, manager, 10, _at(2026, 1, 5), mobile_offer)

        result = ComparativeEvaluator().evaluate_trophies("2026-Q1")

        assert result == {"awarded": 2, "skipped": 0}
        assert _winner("TROPHEE_TOP_GLOBAL") == commercial
        assert _winner("TROPHEE_TOP_TELECOM") == commercial
        award = Award.objects.get(badge__code="TROPHEE_TOP_GLOBAL")
        assert award.period_key == "2026-Q1"
        assert award.metadata["contrats"] == 10

    def test_manager_with_more_contracts_wins(self, seeded_badges, commercial, manager, make_contract):
        _contracts(make_contract, commercial, 10, _at(2026, 1, 5))
        _contracts(make_contract, manager, 11, _at(2026, 1, 5))

        ComparativeEvaluator().evaluate_trophies("2026-Q1")

        assert _winner("TROPHEE_TOP_GLOBAL") == manager

    def test_product_group_trophy(
        self, seeded_badges, commercial, second_commercial, energy_offer, make_contract
    ):
        _contracts(make_contract, commercial, 2, _at(2026, 2, 2), energy_offer)
        _contracts(make_contract, second_commercial, 3, _at(2026, 2, 2), energy_offer)

        ComparativeEvaluator().evaluate_trophies("2026-Q1")

        assert _winner("TROPHEE_TOP_ENERGIE") == second_commercial
        assert not Award.objects.filter(badge__code="TROPHEE_TOP_MTV").exists()

    def test_contracts_outside_the_quarter_do_not_count(self, seeded_badges, commercial, make_contract):
        _contracts(make_contract, commercial, 3, _at(2026, 4, 2))

        assert ComparativeEvaluator().evaluate_trophies("2026-Q1") == {"awarded": 0, "skipped": 0}

    def test_unmapped_participants_cannot_win(self, seeded_badges, commercial, make_contract):
        ghost = Participant.objects.create(kind=Participant.Kind.COMMERCIAL, last_name="Fantome")
        _contracts(make_contract, ghost, 5, _at(2026, 1, 5))
        _contracts(make_contract, commercial, 1, _at(2026, 1, 5))

        ComparativeEvaluator().evaluate_trophies("2026-Q1")

        assert _winner("TROPHEE_TOP_GLOBAL") == commercial

    def test_rerun_is_idempotent(self, seeded_badges, commercial, make_contract):
        _contracts(make_contract, commercial, 2, _at(2026, 1, 5))
        evaluator = ComparativeEvaluator()
        evaluator.evaluate_trophies("2026-Q1")

        assert evaluator.evaluate_trophies("2026-Q1") == {"awarded": 0, "skipped": 1}
        assert Award.objects.count() == 1

    def test_invalid_quarter(self, seeded_badges):
        with pytest.raises(InvalidPeriodKey):
            ComparativeEvaluator().evaluate_trophies("2026-Q5")


@pytest.mark.django_db
class TestPerformanceRanking:
    def test_top_three_of_the_month(self, seeded_badges, commercial, second_commercial, manager, make_contract):
        _contracts(make_contract, commercial, 3, _at(2026, 1, 5))
        _contracts(make_contract, second_commercial, 5, _at(2026, 1, 5))
        _contracts(make_contract, manager, 1, _at(2026, 1, 5))

        result = ComparativeEvaluator().evaluate_performance_ranking("2026-01")

        assert result == {"awarded": 3, "skipped": 0}
        assert _winner("PERF_CONTRAT_OR") == second_commercial
        assert _winner("PERF_VICE_CHAMPION") == commercial
        assert _winner("PERF_TROISIEME_PLACE") == manager
        assert Award.objects.get(badge__code="PERF_CONTRAT_OR").period_key == "2026-01"

    def test_short_leaderboard_skips_missing_positions(self, seeded_badges, commercial, make_contract):
        _contracts(make_contract, commercial, 2, _at(2026, 1, 5))

        result = ComparativeEvaluator().evaluate_performance_ranking("2026-01")

        assert result == {"awarded": 1, "skipped": 0}
        assert _winner("PERF_CONTRAT_OR") == commercial

    def test_equal_counts_put_field_sales_first(self, seeded_badges, commercial, manager, make_contract):
        _contracts(make_contract, manager, 2, _at(2026, 1, 5))
        _contracts(make_contract, commercial, 2, _at(2026, 1, 5))

        leaderboard = ComparativeEvaluator().performance_leaderboard("2026-01")

        assert [entry.participant for entry in leaderboard] == [commercial, manager]


@pytest.mark.django_db
class TestRateRankings:
    def test_conversion_excludes_participants_without_arguments(
        self, seeded_badges, commercial, second_commercial, make_contract, make_event
    ):
        _contracts(make_contract, commercial, 2, _at(2026, 2, 3))
        _contracts(make_contract, second_commercial, 3, _at(2026, 2, 3))
        for index in range(4):
            make_event(commercial, f"D{index}", DoorStatus.ARGUMENTE, _at(2026, 2, 3, 9, index))

        evaluator = ComparativeEvaluator()
        leaderboard = evaluator.conversion_leaderboard("2026-W06")
        evaluator.evaluate_conversion_ranking("2026-W06")

        assert [entry.participant for entry in leaderboard] == [commercial]
        award = Award.objects.get(badge__code="PERF_CONVERSION_KING")
        assert award.participant == commercial
        assert award.period_key == "2026-W06"
        assert award.metadata["rate"] == 50.0
        assert award.metadata["argumentes"] == 4

    def test_conversion_orders_by_rate(
        self, seeded_badges, commercial, second_commercial, make_contract, make_event
    ):
        _contracts(make_contract, commercial, 1, _at(2026, 2, 3))
        _contracts(make_contract, second_commercial, 1, _at(2026, 2, 3))
        for index in range(2):
            make_event(commercial, f"C{index}", DoorStatus.ARGUMENTE, _at(2026, 2, 3, 9, index))
        for index in range(4):
            make_event(second_commercial, f"S{index}", DoorStatus.ARGUMENTE, _at(2026, 2, 3, 9, index))

        leaderboard = ComparativeEvaluator().conversion_leaderboard("2026-W06")

        assert [entry.participant for entry in leaderboard] == [commercial, second_commercial]
        assert [entry.rate for entry in leaderboard] == [0.5, 0.25]

    def test_zero_rate_is_not_awarded(self, seeded_badges, commercial, make_event):
        make_event(commercial, "D1", DoorStatus.ARGUMENTE, _at(2026, 2, 3))

        result = ComparativeEvaluator().evaluate_conversion_ranking("2026-W06")

        assert result == {"awarded": 0, "skipped": 0}

    def test_transformation_ratio_is_field_sales_only(
        self, seeded_badges, commercial, second_commercial, manager, make_contract, make_event
    ):
        _contracts(make_contract, commercial, 1, _at(2026, 2, 2))
        _contracts(make_contract, second_commercial, 2, _at(2026, 2, 2))
        _contracts(make_contract, manager, 5, _at(2026, 2, 2))
        for index in range(10):
            make_event(commercial, f"C{index}", DoorStatus.ABSENT, _at(2026, 2, 2, 9, index))
            make_event(commercial, f"N{index}", DoorStatus.NON_VISITE, _at(2026, 2, 2, 9, index))
        for index in range(5):
            make_event(second_commercial, f"S{index}", DoorStatus.REFUS, _at(2026, 2, 2, 9, index))
        make_event(manager, "M1", DoorStatus.ARGUMENTE, _at(2026, 2, 2))

        evaluator = ComparativeEvaluator()
        leaderboard = evaluator.transformation_leaderboard("2026-02")
        evaluator.evaluate_transformation_ranking("2026-02")

        assert [(entry.participant, entry.denominator) for entry in leaderboard] == [
            (second_commercial, 5),
            (commercial, 10),
        ]
        award = Award.objects.get(badge__code="PERF_CHAMPION_TRANSFORMATION")
        assert award.participant == second_commercial
        assert award.period_key == "2026-02"
