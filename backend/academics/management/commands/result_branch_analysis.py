import json

from django.core.management.base import BaseCommand

from academics.result_analysis import branch_analysis, write_analysis_workbook
from academics.serializers_ingest import BranchAnalysisSerializer


class Command(BaseCommand):
    help = "Per-branch, per-semester pass and class counts over imported results"

    def add_arguments(self, parser):
        parser.add_argument("--academic-year", default=None)
        parser.add_argument("--exam-id", type=int, default=None)
        parser.add_argument("--batch", default=None, help="Upload batch id")
        parser.add_argument("--excel", default=None, help="Also write the table to this .xlsx file")
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **options):
        rows = branch_analysis(
            academic_year=options["academic_year"],
            exam_id=options["exam_id"],
            upload_batch=options["batch"],
        )
        if options["excel"]:
            write_analysis_workbook(rows, options["excel"])
            self.stdout.write(self.style.SUCCESS(f"Analysis written to {options['excel']}"))
        if options["json"]:
            self.stdout.write(json.dumps(BranchAnalysisSerializer(rows, many=True).data, indent=2))
            return
        if not rows:
            self.stdout.write("No results match the filters.")
            return
        for row in rows:
            self.stdout.write(
                f"{row['branch_name'] or '-'} sem {row['semester']}: {row['pass_count']}/{row['total_students']} passed "
                f"({row['pass_percentage']}%), distinction {row['distinction_count']}, "
                f"first {row['first_class_count']}, second {row['second_class_count']}, "
                f"avg SPI {row['average_spi']}, avg CPI {row['average_cpi']}"
            )
