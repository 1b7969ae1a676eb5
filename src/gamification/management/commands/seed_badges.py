"""Seed (or refresh) the badge catalog."""
from django.core.management.base import BaseCommand

from gamification.services import seed_badge_catalog


class Command(BaseCommand):
    help = "Upsert every catalog badge by code (idempotent)."

    def handle(self, *args, **options):
        result = seed_badge_catalog()
        self.stdout.write(f"Catalog version: {result.version}")
        self.stdout.write(f"Badges created: {result.created}")
        self.stdout.write(f"Badges updated: {result.updated}")
        self.stdout.write(self.style.SUCCESS(f"Badge catalog seeding complete ({result.total} badges)."))
