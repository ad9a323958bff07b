"""Upload batch ledger: every results run tags the rows it writes with one batch id."""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from django.db import transaction
from django.db.models import Count, Max

from .conf import ingest_setting
from .domain_result import ExamResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchSummary:
    batch_id: str
    count: int
    latest_upload: Optional[datetime]


@dataclass(frozen=True)
class BatchDeletion:
    batch_id: str
    deleted_count: int

    @property
    def found(self):
        return self.deleted_count > 0


def new_batch_id() -> str:
    return str(uuid.uuid4())


def list_upload_batches(limit=None) -> List[BatchSummary]:
    """Most recent batches first, by the latest write carrying each tag."""
    limit = limit or ingest_setting("BATCH_LISTING_LIMIT")
    rows = (ExamResult.objects
            .exclude(upload_batch__isnull=True)
            .exclude(upload_batch="")
            .values('upload_batch')
            .annotate(count=Count('id'), latest_upload=Max('updated_at'))
            .order_by('-latest_upload', 'upload_batch')[:limit])
    return [BatchSummary(r['upload_batch'], r['count'], r['latest_upload']) for r in rows]


def delete_upload_batch(batch_id) -> BatchDeletion:
    """Delete every result tagged with ``batch_id``; an unknown id deletes nothing."""
    batch_id = (batch_id or "").strip()
    if not batch_id:
        return BatchDeletion(batch_id, 0)
    with transaction.atomic():
        _, per_model = ExamResult.objects.filter(upload_batch=batch_id).delete()
    deleted = per_model.get(ExamResult._meta.label, 0)
    if deleted:
        logger.info("Deleted %s results of upload batch %s", deleted, batch_id)
    else:
        logger.info("Upload batch %s has no results; nothing to delete", batch_id)
    return BatchDeletion(batch_id, deleted)
