from django.core.management.base import BaseCommand, CommandError

from ledger_core.services.verify import verify_ledger


class Command(BaseCommand):
    help = "Replays the ledger and reports accounts whose balance has drifted."

    def add_arguments(self, parser):
        parser.add_argument(
            "--code",
            action="append",
            dest="codes",
            help="Only check this account code (repeatable)",
        )

    def handle(self, *args, **options):
        mismatches = verify_ledger(codes=options["codes"])
        for m in mismatches:
            self.stdout.write(self.style.ERROR(
                f"{m.code}: stored={m.stored} replayed={m.replayed} "
                f"last_running={m.last_running}"
            ))
        if mismatches:
            raise CommandError(f"{len(mismatches)} account(s) out of balance")
        self.stdout.write(self.style.SUCCESS("Ledger balances verified."))
