"""Export stored exam results back into the wide SUB1..SUB15 layout.

Run: python manage.py export_results --branch "Computer Engineering" --semester 5 -o results.csv
"""
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from academics.ingest.results import EXPORT_FORMATS, export_results


class Command(BaseCommand):
    help = "Export exam results as CSV or xlsx in the same column layout the importer reads"

    def add_arguments(self, parser):
        parser.add_argument("-o", "--output", default=None, help="Output file; CSV is printed when omitted")
        parser.add_argument("--format", choices=EXPORT_FORMATS, default=None,
                            help="Defaults to the output file's extension, else csv")
        parser.add_argument("--branch", default=None, help="Branch name (case-insensitive)")
        parser.add_argument("--semester", type=int, default=None)
        parser.add_argument("--academic-year", default=None)
        parser.add_argument("--exam-id", type=int, default=None)
        parser.add_argument("--batch", default=None, help="Upload batch id")

    def handle(self, *args, **options):
        output = options["output"]
        fmt = options["format"]
        if fmt is None:
            fmt = "xlsx" if output and output.lower().endswith(".xlsx") else "csv"
        if fmt == "xlsx" and not output:
            raise CommandError("xlsx export needs --output")

        data = export_results(
            fmt,
            branch_name=options["branch"],
            semester=options["semester"],
            academic_year=options["academic_year"],
            exam_id=options["exam_id"],
            upload_batch=options["batch"],
        )
        if not output:
            self.stdout.write(data, ending="")
            return
        target = Path(output)
        if isinstance(data, bytes):
            target.write_bytes(data)
        else:
            target.write_text(data, encoding="utf-8")
        self.stdout.write(self.style.SUCCESS(f"Results written to {target}"))
