import json

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from gamification.models import BadgeDefinition, RankSnapshot


@pytest.mark.django_db
def test_seed_badges(capsys):
    call_command("seed_badges")
    call_command("seed_badges")

    output = capsys.readouterr().out
    assert "Badges created: 88" in output
    assert "Badges updated: 88" in output
    assert BadgeDefinition.objects.count() == 88


@pytest.mark.django_db
def test_compute_ranking(capsys, commercial, manager):
    call_command("compute_ranking", "MONTHLY", "2026-02")

    assert "Ranking MONTHLY/2026-02: 2 participant(s) ranked." in capsys.readouterr().out
    assert RankSnapshot.objects.filter(period_key="2026-02").count() == 2


@pytest.mark.django_db
def test_compute_ranking_defaults_to_current_period(commercial):
    call_command("compute_ranking", "YEARLY")

    assert RankSnapshot.objects.get().period_type == "YEARLY"


@pytest.mark.django_db
def test_compute_ranking_rejects_bad_key():
    with pytest.raises(CommandError):
        call_command("compute_ranking", "MONTHLY", "2026-W06")


def test_run_gamification_needs_a_mode():
    with pytest.raises(CommandError, match="--daily"):
        call_command("run_gamification")


@pytest.mark.django_db
def test_run_gamification_daily(capsys, seeded_badges, commercial):
    call_command("run_gamification", "--daily")

    output = capsys.readouterr().out
    summary = json.loads(output[: output.rindex("}") + 1])
    assert summary["ingestion"]["status"] == "skipped"
    assert summary["evaluation"]["status"] == "ok"
    assert "Gamification run complete." in output
