"""Import a university results extract (CSV or Excel) into ExamResult rows.

Run: python manage.py import_results results.csv [--mode insert] [--json]
"""

from django.core.management.base import BaseCommand, CommandError

from academics.exceptions import PersistenceError, StructuralError
from academics.ingest.results import IMPORT_MODES, MODE_UPSERT, import_results
from academics.management.reporting import cancel_on_interrupt, read_upload, write_report


class Command(BaseCommand):
    help = "Import exam results in the wide SUB1..SUB15 format; every run gets its own upload batch id"

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV or .xlsx file exported by the university results system")
        parser.add_argument("--mode", choices=IMPORT_MODES, default=MODE_UPSERT,
                            help="upsert (default) updates existing results; insert counts them as duplicates")
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per write sub-batch")
        parser.add_argument("--workers", type=int, default=None, help="Concurrent writes per sub-batch")
        parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    def handle(self, *args, **options):
        content = read_upload(options["path"])
        with cancel_on_interrupt() as cancel_event:
            try:
                report = import_results(
                    content, options["path"],
                    mode=options["mode"],
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
