"""Exam results import and export in the university's wide-row format."""
import csv
import io
import logging
from functools import partial

import pandas as pd
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from ..batches import new_batch_id
from ..domain_logs import ImportRunKind
from ..domain_result import ExamResult
from ..exceptions import DuplicateKeyError, PersistenceError, StructuralError
from ..wide_format import export_header, has_component_grades, normalize_result_row, result_to_wide_row
from .audit import record_run
from .decoder import decode_tabular
from .orchestrator import UpsertOrchestrator
from .report import ImportReport, WriteOutcome, WriteStatus

logger = logging.getLogger(__name__)

MODE_UPSERT = "upsert"
MODE_INSERT = "insert"
IMPORT_MODES = (MODE_UPSERT, MODE_INSERT)

EXPORT_FORMATS = ("csv", "xlsx")


def upsert_result(candidate, upload_batch):
    _, created = ExamResult.objects.update_or_create(
        enrollment_no=candidate.enrollment_no,
        exam_id=candidate.exam_id,
        defaults=candidate.defaults(upload_batch),
    )
    return WriteStatus.CREATED if created else WriteStatus.UPDATED


def insert_result(candidate, upload_batch):
    try:
        with transaction.atomic():
            ExamResult.objects.create(
                enrollment_no=candidate.enrollment_no,
                exam_id=candidate.exam_id,
                **candidate.defaults(upload_batch),
            )
    except IntegrityError as exc:
        if ExamResult.objects.filter(enrollment_no=candidate.enrollment_no, exam_id=candidate.exam_id).exists():
            raise DuplicateKeyError(f"Result {candidate.key} already exists", key=candidate.key) from exc
        raise
    return WriteStatus.CREATED


def bulk_insert_results(items, upload_batch):
    """Insert a whole sub-batch at once; None sends the sub-batch down the per-row path."""
    objs = [
        ExamResult(enrollment_no=item.value.enrollment_no, exam_id=item.value.exam_id,
                   **item.value.defaults(upload_batch))
        for item in items
    ]
    try:
        with transaction.atomic():
            ExamResult.objects.bulk_create(objs)
    except (DatabaseError, ValueError, OverflowError) as exc:
        # one bad row rejects the whole statement; the per-row path pins it down
        logger.info("Bulk insert of %s results failed (%s); retrying row by row", len(objs), exc)
        return None
    return [WriteOutcome(item.row, WriteStatus.CREATED) for item in items]


def import_results(content, filename=None, *, mode=MODE_UPSERT, user=None, cancel_event=None,
                   batch_size=None, workers=None):
    """Import a results extract and return its ImportReport.

    Every written row is tagged with a fresh upload batch id. ``upsert``
    updates existing (enrollment_no, exam_id) rows in place; ``insert`` is the
    bulk first-load path where existing keys are counted as duplicates.
    """
    if mode not in IMPORT_MODES:
        raise ValueError(f"Unknown import mode {mode!r}; expected one of {', '.join(IMPORT_MODES)}")
    started_at = timezone.now()
    report = ImportReport(kind=ImportRunKind.RESULTS.value, source_name=filename)
    try:
        rows = decode_tabular(content, filename)
    except StructuralError as exc:
        record_run(report, started_at=started_at, user=user, failed=True, message=str(exc))
        raise

    report.total_rows = len(rows)
    report.batch_id = new_batch_id()
    logger.info("Importing %s result rows from %s as batch %s (%s)",
                len(rows), filename or "<text>", report.batch_id, mode)

    staged = [normalize_result_row(row, number) for number, row in enumerate(rows, start=1)]
    if mode == MODE_INSERT:
        orchestrator = UpsertOrchestrator(
            partial(insert_result, upload_batch=report.batch_id),
            write_chunk=partial(bulk_insert_results, upload_batch=report.batch_id),
            batch_size=batch_size, workers=workers, cancel_event=cancel_event,
        )
    else:
        orchestrator = UpsertOrchestrator(
            partial(upsert_result, upload_batch=report.batch_id),
            batch_size=batch_size, workers=workers, cancel_event=cancel_event,
        )
    try:
        orchestrator.run(staged, report)
    except PersistenceError as exc:
        record_run(report, started_at=started_at, user=user, failed=True, message=str(exc))
        raise

    record_run(report, started_at=started_at, user=user)
    logger.info("Results batch %s: %s imported, %s duplicates, %s errors, %s warnings",
                report.batch_id, report.processed_count, report.duplicate_count,
                len(report.errors), len(report.warnings))
    return report


def filter_results(*, branch_name=None, semester=None, academic_year=None, exam_id=None, upload_batch=None):
    qs = ExamResult.objects.all()
    if branch_name:
        qs = qs.filter(branch_name__iexact=branch_name.strip())
    if semester is not None:
        qs = qs.filter(semester=semester)
    if academic_year:
        qs = qs.filter(academic_year=academic_year.strip())
    if exam_id is not None:
        qs = qs.filter(exam_id=exam_id)
    if upload_batch:
        qs = qs.filter(upload_batch=upload_batch.strip())
    return qs.order_by('enrollment_no', 'exam_id')


def export_results(fmt="csv", **filters):
    """Render the filtered results in the import layout: CSV text or xlsx bytes."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")
    records = list(filter_results(**filters))
    include_components = any(has_component_grades(r.subjects) for r in records)
    header = export_header(include_components)
    rows = [result_to_wide_row(r, include_components) for r in records]
    logger.info("Exporting %s results (%s)", len(rows), fmt)

    if fmt == "xlsx":
        output = io.BytesIO()
        df = pd.DataFrame(rows, columns=header)
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Results")
        return output.getvalue()

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=header, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue()
