"""Create StudentRecords for users who signed up with the Student role.

A user in the Student group without a StudentRecord gets one, using the
department on their academic profile and the enrollment number they asked
for, or a freshly allocated one.
"""
import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional

from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone

from ..conf import ingest_setting
from ..derivation import (
    derive_admission_year, derive_batch_range, derive_institutional_email, resolve_program_semesters,
    semester_status_map,
)
from ..domain_department import Department, UserProfile
from ..domain_logs import ImportRunKind
from ..domain_student import StudentRecord
from ..enrollment import create_with_allocated_enrollment
from ..exceptions import PersistenceError, RowError
from .audit import record_run
from .orchestrator import UpsertOrchestrator
from .report import ImportReport, RowResult, WriteStatus

logger = logging.getLogger(__name__)


@dataclass
class SignupCandidate:
    user: User
    department: Department
    program_semesters: int
    requested_enrollment_no: Optional[str] = None
    year: Optional[int] = None

    @property
    def key(self):
        return self.user.username


def pending_student_users(group_name=None):
    group_name = group_name or ingest_setting("STUDENT_GROUP")
    return (User.objects
            .filter(groups__name=group_name, student_record__isnull=True)
            .select_related('academic_profile__department')
            .order_by('id')
            .distinct())


def normalize_signup(user, row_number, max_semester=None, year=None) -> RowResult:
    try:
        profile = user.academic_profile
    except UserProfile.DoesNotExist:
        profile = None
    department = profile.department if profile is not None else None
    if department is None or not department.is_active:
        return RowResult.warn(row_number, "No active department on the user's academic profile; skipped",
                              key=user.username)
    try:
        program_semesters = resolve_program_semesters(department.program_semesters, max_semester)
    except ValueError as exc:
        return RowResult.fail(row_number, str(exc), key=user.username)
    if program_semesters is None:
        return RowResult.fail(row_number, f"Program length unknown for department {department.code}",
                              key=user.username)
    requested = (profile.requested_enrollment_no or "").strip() or None
    return RowResult.ok(row_number, SignupCandidate(
        user=user,
        department=department,
        program_semesters=program_semesters,
        requested_enrollment_no=requested,
        year=year,
    ))


def _create_student(candidate, enrollment_no):
    user = candidate.user
    admission_year = derive_admission_year(enrollment_no)
    full_name = " ".join(p for p in (user.first_name, user.last_name) if p) or user.username
    return StudentRecord.objects.create(
        enrollment_no=enrollment_no,
        user=user,
        department=candidate.department,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        full_name=full_name,
        institutional_email=derive_institutional_email(enrollment_no),
        personal_email=user.email or None,
        admission_year=admission_year,
        batch=derive_batch_range(admission_year, candidate.program_semesters),
        program_semesters=candidate.program_semesters,
        semester_status={k: str(v) for k, v in semester_status_map({}).items()},
    )


def write_signup(candidate):
    with transaction.atomic():
        # one sync at a time per user
        User.objects.select_for_update().filter(pk=candidate.user.pk).first()
        if StudentRecord.objects.filter(user=candidate.user).exists():
            return WriteStatus.UNCHANGED
        requested = candidate.requested_enrollment_no
        if requested:
            if StudentRecord.objects.filter(enrollment_no=requested).exists():
                raise RowError(f"Enrollment number {requested} already belongs to another student",
                               key=candidate.key)
            _create_student(candidate, requested)
        else:
            create_with_allocated_enrollment(partial(_create_student, candidate), year=candidate.year)
    return WriteStatus.CREATED


def sync_student_roles(*, max_semester=None, year=None, user=None, cancel_event=None,
                       batch_size=None, workers=None):
    """Give every Student-group user without a StudentRecord one; returns the ImportReport."""
    started_at = timezone.now()
    pending = list(pending_student_users())
    report = ImportReport(kind=ImportRunKind.ROLE_SYNC.value, total_rows=len(pending), source_name="auth.User")
    logger.info("Synchronizing %s student signups", len(pending))
    staged = [
        normalize_signup(u, number, max_semester=max_semester, year=year)
        for number, u in enumerate(pending, start=1)
    ]
    orchestrator = UpsertOrchestrator(write_signup, batch_size=batch_size, workers=workers,
                                      cancel_event=cancel_event)
    try:
        orchestrator.run(staged, report)
    except PersistenceError as exc:
        record_run(report, started_at=started_at, user=user, failed=True, message=str(exc))
        raise
    record_run(report, started_at=started_at, user=user)
    logger.info("Student role sync: %s created, %s errors, %s warnings",
                report.created_count, len(report.errors), len(report.warnings))
    return report
