from django.core.management.base import BaseCommand, CommandError

from academics.exceptions import PersistenceError
from academics.ingest.role_sync import sync_student_roles
from academics.management.reporting import cancel_on_interrupt, write_report


class Command(BaseCommand):
    help = "Create student records for Student-group users that do not have one yet"

    def add_arguments(self, parser):
        parser.add_argument("--max-semester", type=int, choices=[6, 8], default=None,
                            help="Program length for departments that do not define one")
        parser.add_argument("--year", type=int, default=None,
                            help="Admission year used for allocated enrollment numbers (default: current year)")
        parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    def handle(self, *args, **options):
        with cancel_on_interrupt() as cancel_event:
            try:
                report = sync_student_roles(
                    max_semester=options["max_semester"],
                    year=options["year"],
                    cancel_event=cancel_event,
                )
            except PersistenceError as exc:
                if exc.report is not None:
                    write_report(self, exc.report, options["json"])
                raise CommandError(f"Sync stopped: {exc}") from exc
        write_report(self, report, options["json"])
