import json

from django.core.management.base import BaseCommand

from academics.batches import list_upload_batches
from academics.serializers_ingest import BatchSummarySerializer


class Command(BaseCommand):
    help = "List the most recent result upload batches with their row counts"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Number of batches to show (default 20)")
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **options):
        batches = list_upload_batches(options["limit"])
        if options["json"]:
            self.stdout.write(json.dumps(BatchSummarySerializer(batches, many=True).data, indent=2))
            return
        if not batches:
            self.stdout.write("No upload batches found.")
            return
        for batch in batches:
            latest = batch.latest_upload.isoformat(timespec="seconds") if batch.latest_upload else "-"
            self.stdout.write(f"{batch.batch_id}  {batch.count:>6} results  last written {latest}")
