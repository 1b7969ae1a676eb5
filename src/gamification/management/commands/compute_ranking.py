"""Recompute the leaderboard of one period."""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from core.periods import InvalidPeriodKey, period_keys
from gamification.leaderboard import PERIOD_GRANULARITIES
from gamification.services import recompute_ranking


class Command(BaseCommand):
    help = "Recompute rankings for a period type (DAILY, WEEKLY, MONTHLY, QUARTERLY, YEARLY)."

    def add_arguments(self, parser):
        parser.add_argument("period_type", choices=sorted(PERIOD_GRANULARITIES))
        parser.add_argument(
            "period_key",
            nargs="?",
            default="",
            help="Period key (ex: 2026-W06, 2026-02). Default: the current period.",
        )

    def handle(self, *args, **options):
        period_type = options["period_type"]
        period_key = options["period_key"] or period_keys(timezone.localtime()).for_granularity(
            PERIOD_GRANULARITIES[period_type]
        )
        try:
            result = recompute_ranking(period_type, period_key)
        except InvalidPeriodKey as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(
            self.style.SUCCESS(
                f"Ranking {period_type}/{period_key}: {result['computed']} participant(s) ranked."
            )
        )
