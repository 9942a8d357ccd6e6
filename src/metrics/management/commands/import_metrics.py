"""Import monthly metrics from an Excel workbook."""
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from metrics.importers import import_metrics_from_excel


class Command(BaseCommand):
    help = "Upsert monthly account manager metrics from an .xlsx file"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to the .xlsx workbook")

    def handle(self, *args, **options):
        path = Path(options["path"]).resolve()
        if not path.exists():
            raise CommandError(f"File does not exist: {path}")

        with path.open("rb") as handle:
            result = import_metrics_from_excel(handle)

        for detail in result["error_details"]:
            self.stderr.write(detail)

        self.stdout.write(self.style.SUCCESS(
            f"Imported {path.name}: {result['created']} created, "
            f"{result['updated']} updated, {result['skipped']} skipped, "
            f"{result['errors']} error(s)"
        ))
