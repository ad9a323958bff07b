"""Sub-batched, idempotent writes for bulk ingestion runs.

Candidates are written in sequential sub-batches. Inside a sub-batch the
writes overlap on a small thread pool and are awaited together, and a failure
in one write never cancels its siblings. A storage outage escalates as
PersistenceError once the current sub-batch has settled.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from django.core.exceptions import ValidationError
from django.db import InterfaceError, OperationalError, connection

from ..conf import ingest_setting
from ..exceptions import DuplicateKeyError, PersistenceError, RowError
from .report import RowFailure, WriteOutcome, WriteStatus

logger = logging.getLogger(__name__)

STORAGE_FAILURES = (OperationalError, InterfaceError)


class UpsertOrchestrator:
    """Drive ``write_row`` (and optionally ``write_chunk``) over staged rows.

    ``write_row(candidate)`` returns a WriteStatus value and raises RowError /
    DuplicateKeyError for row-level problems. ``write_chunk(items)`` receives
    the sub-batch's RowResults and returns one WriteOutcome per item, or None
    to fall back to per-row writes for that sub-batch.
    """

    def __init__(self, write_row, *, write_chunk=None, batch_size=None, workers=None, cancel_event=None):
        self.write_row = write_row
        self.write_chunk = write_chunk
        self.batch_size = max(1, int(batch_size or ingest_setting("SUB_BATCH_SIZE")))
        self.workers = max(1, int(workers or ingest_setting("WRITE_WORKERS")))
        self.cancel_event = cancel_event

    def run(self, staged, report):
        candidates = []
        for result in staged:
            if result.is_ok:
                candidates.append(result)
            else:
                report.add_failure(result.failure)

        chunks = [candidates[i:i + self.batch_size] for i in range(0, len(candidates), self.batch_size)]
        executor = None
        if self.workers > 1 and candidates:
            executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="ingest-write")
        try:
            for index, chunk in enumerate(chunks, start=1):
                if self.cancel_event is not None and self.cancel_event.is_set():
                    report.cancelled = True
                    pending = sum(len(c) for c in chunks[index - 1:])
                    logger.warning("%s import cancelled before sub-batch %s/%s; %s rows not written",
                                   report.kind, index, len(chunks), pending)
                    break
                storage_error = None
                for outcome in self._write_sub_batch(chunk, executor):
                    report.record(outcome)
                    if outcome.storage_error is not None and storage_error is None:
                        storage_error = outcome.storage_error
                logger.debug("%s sub-batch %s/%s written (%s rows)", report.kind, index, len(chunks), len(chunk))
                if storage_error is not None:
                    report.finalize()
                    logger.error("%s import stopped at sub-batch %s/%s: %s",
                                 report.kind, index, len(chunks), storage_error)
                    raise PersistenceError(f"Storage unavailable: {storage_error}", report=report) from storage_error
        finally:
            if executor is not None:
                executor.shutdown(wait=True)
        return report.finalize()

    def _write_sub_batch(self, chunk, executor):
        if self.write_chunk is not None:
            outcomes = self._guarded_chunk(chunk)
            if outcomes is not None:
                return outcomes
        if executor is None:
            return [self._guarded(item) for item in chunk]
        futures = [executor.submit(self._in_worker, item) for item in chunk]
        return [future.result() for future in futures]

    def _guarded_chunk(self, chunk):
        try:
            return self.write_chunk(chunk)
        except STORAGE_FAILURES as exc:
            return [
                WriteOutcome(item.row, WriteStatus.FAILED,
                             RowFailure(item.row, f"Storage error: {exc}", _key_of(item)), storage_error=exc)
                for item in chunk
            ]

    def _in_worker(self, item):
        try:
            return self._guarded(item)
        finally:
            # worker threads own their DB connection
            connection.close()

    def _guarded(self, item):
        key = _key_of(item)
        try:
            status = self.write_row(item.value)
        except DuplicateKeyError:
            return WriteOutcome(item.row, WriteStatus.DUPLICATE)
        except RowError as exc:
            failure = RowFailure(item.row, exc.message, exc.key or key, exc.severity)
            return WriteOutcome(item.row, WriteStatus.FAILED, failure)
        except STORAGE_FAILURES as exc:
            return WriteOutcome(item.row, WriteStatus.FAILED,
                                RowFailure(item.row, f"Storage error: {exc}", key), storage_error=exc)
        except ValidationError as exc:
            return WriteOutcome(item.row, WriteStatus.FAILED, RowFailure(item.row, "; ".join(exc.messages), key))
        except Exception as exc:
            logger.warning("Row %s (%s) failed: %s", item.row, key, exc, exc_info=True)
            return WriteOutcome(item.row, WriteStatus.FAILED, RowFailure(item.row, str(exc), key))
        return WriteOutcome(item.row, status)


def _key_of(item):
    return getattr(item.value, "key", None)
