"""Match participants with the users of the contract feed."""
from django.core.management.base import BaseCommand, CommandError

from contracts.clients import UpstreamError, WinleadPlusClient, fetch_service_token, keycloak_configured
from participants.services import confirm_mappings, remove_mapping, suggest_mappings


class Command(BaseCommand):
    help = (
        "List external identity suggestions for every active participant; "
        "--confirm writes the confident ones, --remove clears a mapping."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--token",
            type=str,
            default="",
            help="Bearer token to use instead of the Keycloak service account.",
        )
        parser.add_argument("--confirm", action="store_true", help="Write suggestions above --min-confidence.")
        parser.add_argument("--min-confidence", type=int, default=90, help="Default: 90.")
        parser.add_argument("--remove", type=str, default="", metavar="PARTICIPANT_ID",
                            help="Clear the external id of one participant and exit.")

    def handle(self, *args, **options):
        if options["remove"]:
            if not remove_mapping(options["remove"]):
                raise CommandError(f"Participant {options['remove']} not found.")
            self.stdout.write(self.style.SUCCESS(f"Mapping removed for {options['remove']}."))
            return

        token = options["token"]
        if not token and not keycloak_configured():
            raise CommandError("Keycloak settings missing and no --token given.")
        try:
            users = WinleadPlusClient(token or fetch_service_token()).get_users()
        except UpstreamError as exc:
            raise CommandError(str(exc)) from exc

        suggestions = suggest_mappings(users)
        to_confirm = []
        for suggestion in suggestions:
            if suggestion.already_mapped:
                status = "mapped"
            elif suggestion.external_id is None:
                status = "no match"
            else:
                status = f"{suggestion.confidence}%"
                if suggestion.confidence >= options["min_confidence"]:
                    to_confirm.append((str(suggestion.participant.pk), suggestion.external_id))
            self.stdout.write(
                f"{suggestion.participant} -> {suggestion.external_id or '-'} "
                f"{suggestion.external_name} [{status}]"
            )

        if options["confirm"]:
            result = confirm_mappings(to_confirm)
            self.stdout.write(
                self.style.SUCCESS(f"Mappings: {result['mapped']} written, {result['skipped']} skipped.")
            )
