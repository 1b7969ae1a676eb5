"""Run the gamification pipeline synchronously (without the Celery worker)."""
import json

from django.core.management.base import BaseCommand, CommandError

from gamification.tasks import run_daily_pipeline, run_monthly_evaluation


class Command(BaseCommand):
    help = "Run the daily pipeline and/or the monthly trophy & ranking evaluation."

    def add_arguments(self, parser):
        parser.add_argument("--daily", action="store_true", help="Sync, evaluate badges, compute rankings.")
        parser.add_argument("--monthly", action="store_true", help="Quarterly trophies and monthly rankings.")

    def handle(self, *args, **options):
        if not options["daily"] and not options["monthly"]:
            raise CommandError("Choose --daily and/or --monthly.")

        if options["daily"]:
            summary = run_daily_pipeline()
            self.stdout.write(json.dumps(summary, indent=2, default=str, ensure_ascii=False))
        if options["monthly"]:
            summary = run_monthly_evaluation()
            self.stdout.write(json.dumps(summary, indent=2, default=str, ensure_ascii=False))
        self.stdout.write(self.style.SUCCESS("Gamification run complete."))
