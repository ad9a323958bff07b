"""Helpers shared by the ingestion management commands."""
import json
import signal
import threading
from contextlib import contextmanager
from pathlib import Path

from django.core.management.base import CommandError

from ..serializers_ingest import ImportReportSerializer

MAX_LISTED_FAILURES = 50


def read_upload(path):
    source = Path(path)
    if not source.is_file():
        raise CommandError(f"File not found: {path}")
    return source.read_bytes()


@contextmanager
def cancel_on_interrupt():
    """Yield an Event that Ctrl+C sets instead of killing the run mid-write."""
    event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield event
        return
    previous = signal.getsignal(signal.SIGINT)

    def _interrupt(signum, frame):
        event.set()

    signal.signal(signal.SIGINT, _interrupt)
    try:
        yield event
    finally:
        signal.signal(signal.SIGINT, previous)


def write_report(command, report, as_json=False):
    if as_json:
        command.stdout.write(json.dumps(ImportReportSerializer(report).data, indent=2))
        return
    style = command.style
    summary = (f"{report.kind}: {report.processed_count}/{report.total_rows} rows imported "
               f"({report.created_count} created, {report.updated_count} updated")
    if report.duplicate_count:
        summary += f", {report.duplicate_count} duplicates"
    summary += ")"
    if report.batch_id:
        summary += f" batch {report.batch_id}"
    command.stdout.write(style.SUCCESS(summary) if not report.errors else style.WARNING(summary))
    for label, failures in (("Error", report.errors), ("Warning", report.warnings)):
        for failure in failures[:MAX_LISTED_FAILURES]:
            key = f" [{failure.key}]" if failure.key else ""
            command.stdout.write(f"  {label} row {failure.row}{key}: {failure.message}")
        if len(failures) > MAX_LISTED_FAILURES:
            command.stdout.write(f"  ... {len(failures) - MAX_LISTED_FAILURES} more {label.lower()}s")
    if report.cancelled:
        command.stdout.write(style.WARNING("Run was cancelled; remaining sub-batches were not written."))
