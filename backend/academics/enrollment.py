"""Enrollment number allocation: ``<year><4-digit sequence>`` per admission year."""
import logging

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .conf import ingest_setting
from .domain_student import EnrollmentSequence, StudentRecord
from .exceptions import RowError

logger = logging.getLogger(__name__)


def format_enrollment_no(year, sequence):
    return f"{year}{sequence:04d}"


def highest_existing_sequence(year):
    """Numeric suffix of the greatest enrollment number already issued for ``year``, else 0."""
    prefix = str(year)
    last = (StudentRecord.objects
            .filter(enrollment_no__startswith=prefix)
            .order_by('-enrollment_no')
            .values_list('enrollment_no', flat=True)
            .first())
    if not last:
        return 0
    try:
        return int(last[len(prefix):])
    except ValueError:
        return 0


def allocate_enrollment_no(year=None):
    """Reserve and return the next enrollment number for ``year`` (default: current year).

    The per-year counter row is created on first use, seeded from the
    numbers already in the table, and incremented under a row lock, so
    concurrent callers never receive the same number.
    """
    year = int(year or timezone.localdate().year)
    with transaction.atomic():
        EnrollmentSequence.objects.get_or_create(year=year, defaults={'last_value': highest_existing_sequence(year)})
        seq = EnrollmentSequence.objects.select_for_update().get(year=year)
        seq.last_value = F('last_value') + 1
        seq.save(update_fields=['last_value', 'updated_at'])
        seq.refresh_from_db(fields=['last_value'])
    return format_enrollment_no(year, seq.last_value)


def resync_sequence(year):
    """Move the counter past any number inserted behind its back (e.g. by a roster import)."""
    year = int(year)
    with transaction.atomic():
        seq, _ = EnrollmentSequence.objects.select_for_update().get_or_create(year=year)
        highest = highest_existing_sequence(year)
        if highest > seq.last_value:
            seq.last_value = highest
            seq.save(update_fields=['last_value', 'updated_at'])
    return seq.last_value


def create_with_allocated_enrollment(create, year=None, retries=None):
    """Call ``create(enrollment_no)`` with freshly allocated numbers until one is free.

    A unique-index collision on the enrollment number resyncs the counter and
    tries again, up to ``ALLOCATION_RETRIES`` times.
    """
    year = int(year or timezone.localdate().year)
    attempts = int(retries or ingest_setting("ALLOCATION_RETRIES"))
    for attempt in range(1, attempts + 1):
        enrollment_no = allocate_enrollment_no(year)
        try:
            with transaction.atomic():
                return create(enrollment_no)
        except IntegrityError:
            if not StudentRecord.objects.filter(enrollment_no=enrollment_no).exists():
                raise
            logger.warning("Enrollment number %s already taken (attempt %s/%s); resyncing counter",
                           enrollment_no, attempt, attempts)
            resync_sequence(year)
    raise RowError(f"Could not allocate a free enrollment number for {year} after {attempts} attempts")
