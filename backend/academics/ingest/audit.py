"""Persist one ImportRunLog row per ingestion run."""
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..conf import ingest_setting
from ..domain_logs import ImportRunLog, ImportRunStatus

logger = logging.getLogger(__name__)


def record_run(report, *, started_at, user=None, failed=False, message=None):
    """Write the audit row for ``report``.

    The run outcome has already been decided by the time this runs, so a
    failure here is logged and never raised.
    """
    if failed:
        status = ImportRunStatus.FAILED
    else:
        status = report.status
    limit = ingest_setting("RUN_LOG_DETAIL_LIMIT")
    try:
        with transaction.atomic():
            return ImportRunLog.objects.create(
                kind=report.kind,
                batch_id=report.batch_id,
                source_name=(report.source_name or "")[:255] or None,
                total_rows=report.total_rows,
                processed_count=report.processed_count,
                created_count=report.created_count,
                updated_count=report.updated_count,
                duplicate_count=report.duplicate_count,
                error_count=len(report.errors),
                warning_count=len(report.warnings),
                status=status,
                errors=[f.as_dict() for f in report.errors[:limit]],
                warnings=[f.as_dict() for f in report.warnings[:limit]],
                message=message,
                created_by=user if getattr(user, "pk", None) else None,
                started_at=started_at,
                finished_at=timezone.now(),
            )
    except DatabaseError:
        logger.exception("Could not record %s import run %s", report.kind, report.batch_id or "")
        return None
