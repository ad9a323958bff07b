import json

from django.core.management.base import BaseCommand

from academics.batches import delete_upload_batch
from academics.serializers_ingest import BatchDeletionSerializer


class Command(BaseCommand):
    help = "Delete every exam result written by one upload batch"

    def add_arguments(self, parser):
        parser.add_argument("batch_id")
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **options):
        deletion = delete_upload_batch(options["batch_id"])
        if options["json"]:
            self.stdout.write(json.dumps(BatchDeletionSerializer(deletion).data, indent=2))
            return
        if deletion.found:
            self.stdout.write(self.style.SUCCESS(
                f"Deleted {deletion.deleted_count} results from batch {deletion.batch_id}"))
        else:
            self.stdout.write(self.style.WARNING(f"Nothing to delete: no results in batch {deletion.batch_id}"))
