"""Import a student roster extract into StudentRecord rows.

Run: python manage.py import_roster roster.xlsx --max-semester 8
"""
from django.core.management.base import BaseCommand, CommandError

from academics.exceptions import PersistenceError, StructuralError
from academics.ingest.roster import import_roster
from academics.management.reporting import cancel_on_interrupt, read_upload, write_report


class Command(BaseCommand):
    help = "Import students (map_number, Name, BR_CODE, SEM1..SEM8, ...) keyed by enrollment number"

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV or .xlsx roster extract")
        parser.add_argument("--max-semester", type=int, choices=[6, 8], default=None,
                            help="Program length for departments that do not define one")
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per write sub-batch")
        parser.add_argument("--workers", type=int, default=None, help="Concurrent writes per sub-batch")
        parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    def handle(self, *args, **options):
        content = read_upload(options["path"])
        with cancel_on_interrupt() as cancel_event:
            try:
                report = import_roster(
                    content, options["path"],
                    max_semester=options["max_semester"],
                    batch_size=options["batch_size"],
                    workers=options["workers"],
                    cancel_event=cancel_event,
                )
            except StructuralError as exc:
                raise CommandError(f"Nothing imported: {exc}") from exc
            except PersistenceError as exc:
                if exc.report is not None:
                    write_report(self, exc.report, options["json"])
                raise CommandError(f"Import stopped: {exc}") from exc
        write_report(self, report, options["json"])
