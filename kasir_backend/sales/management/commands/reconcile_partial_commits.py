from django.core.management.base import BaseCommand, CommandError

from datastore.exceptions import RecordStoreError
from sales.services.reconciliation import find_partial_commits, repair_partial_commit


class Command(BaseCommand):
    help = "Find (and with --apply, repair) transactions saved without their items"

    def add_arguments(self, parser):
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Insert the missing items. Without it, only list what would be repaired.",
        )

    def handle(self, *args, **options):
        entries = list(find_partial_commits())

        if not entries:
            self.stdout.write(self.style.SUCCESS("No partial commits found."))
            return

        self.stdout.write(self.style.WARNING(f"{len(entries)} partial commit(s) found."))

        for entry in entries:
            if entry.transaction_id is None:
                label = f"unconfirmed checkout {entry.id} ({len(entry.item_rows)} item(s))"
            else:
                label = f"transaction #{entry.transaction_id} ({len(entry.item_rows)} item(s))"

            if not options["apply"]:
                self.stdout.write(f"  - {label} [dry run]")
                continue

            try:
                outcome = repair_partial_commit(entry)
            except RecordStoreError as exc:
                raise CommandError(f"Repair of {label} failed: {exc}") from exc

            self.stdout.write(f"  - {label}: {outcome}")

        if options["apply"]:
            self.stdout.write(self.style.SUCCESS("Reconciliation finished."))
