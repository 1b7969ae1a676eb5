"""Pull offers and validated contracts from the contract feed."""
from django.core.management.base import BaseCommand, CommandError

from catalog.services import sync_offers
from contracts.clients import UpstreamError, WinleadPlusClient, fetch_service_token, keycloak_configured
from contracts.services import sync_contracts


class Command(BaseCommand):
    help = "Synchronise offers and validated contracts from the contract feed."

    def add_arguments(self, parser):
        parser.add_argument(
            "--token",
            type=str,
            default="",
            help="Bearer token to use instead of the Keycloak service account.",
        )
        parser.add_argument("--skip-offers", action="store_true", help="Only synchronise contracts.")

    def handle(self, *args, **options):
        token = options["token"]
        if not token and not keycloak_configured():
            raise CommandError("Keycloak settings missing and no --token given.")

        try:
            client = WinleadPlusClient(token or fetch_service_token())
            if not options["skip_offers"]:
                offers = sync_offers(client.get_offers())
                self.stdout.write(
                    f"Offers: {offers['created']} created, {offers['updated']} updated, "
                    f"{offers['skipped']} skipped"
                )
            result = sync_contracts(client)
        except UpstreamError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Contracts: {result['created']} created, {result['updated']} updated, "
                f"{result['skipped']} skipped ({result['total']} total)"
            )
        )
