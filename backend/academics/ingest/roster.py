"""Student roster import.

Each roster row becomes (or updates) one StudentRecord keyed by enrollment
number, linked to its department and to an ``auth.User`` in the Student
group.
"""
import logging
from dataclasses import dataclass
from datetime import date
from functools import partial
from typing import Optional

from django.contrib.auth.models import Group, User
from django.db import transaction
from django.utils import timezone

from ..conf import ingest_setting
from ..derivation import (
    ENROLLMENT_MAX_LENGTH, SEMESTER_SLOTS, NameParts, derive_admission_year, derive_batch_range,
    derive_institutional_email, parse_boolean_flag, parse_full_name, resolve_program_semesters, semester_status_map,
)
from ..domain_department import Department
from ..domain_logs import ImportRunKind
from ..domain_student import StudentRecord, StudentStatus
from ..exceptions import PersistenceError, StructuralError
from .audit import record_run
from .decoder import decode_tabular
from .helpers import cell, parse_excel_date
from .orchestrator import UpsertOrchestrator
from .report import ImportReport, RowResult, WriteStatus
from .resolver import DepartmentResolver

logger = logging.getLogger(__name__)

ENROLLMENT_COLUMN = "map_number"
NAME_COLUMN = "Name"
DEPARTMENT_COLUMN = "BR_CODE"
SEMESTER_COLUMN = "SEM{n}"
FLAG_COLUMNS = {
    "is_complete": "IS_COMPLETE",
    "term_close": "TERM_CLOSE",
    "is_cancel": "IS_CANCEL",
    "is_pass_all": "IS_PASS_ALL",
}


@dataclass
class RosterCandidate:
    enrollment_no: str
    department: Department
    names: NameParts
    full_name: str
    institutional_email: str
    personal_email: Optional[str]
    admission_year: int
    batch: str
    program_semesters: int
    semester_status: dict
    gender: Optional[str]
    birth_date: Optional[date]
    category: Optional[str]
    mobile: Optional[str]
    flags: dict
    status: str

    @property
    def key(self):
        return self.enrollment_no

    def record_fields(self):
        return {
            "department": self.department,
            "first_name": self.names.first,
            "middle_name": self.names.middle,
            "last_name": self.names.last,
            "full_name": self.full_name,
            "institutional_email": self.institutional_email,
            "personal_email": self.personal_email,
            "admission_year": self.admission_year,
            "batch": self.batch,
            "program_semesters": self.program_semesters,
            "semester_status": self.semester_status,
            "gender": self.gender,
            "birth_date": self.birth_date,
            "category": self.category,
            "mobile": self.mobile,
            "status": self.status,
            **self.flags,
        }


def _roster_status(raw, flags):
    value = (raw or "").strip().lower()
    if value in StudentStatus.values:
        return value
    if flags["is_cancel"]:
        return StudentStatus.DROPPED.value
    if flags["is_complete"]:
        return StudentStatus.GRADUATED.value
    return StudentStatus.ACTIVE.value


def normalize_roster_row(row, row_number, resolver, max_semester=None, today=None) -> RowResult:
    enrollment_no = cell(row, ENROLLMENT_COLUMN)
    if not enrollment_no:
        return RowResult.fail(row_number, f"Missing enrollment number ({ENROLLMENT_COLUMN})")
    if len(enrollment_no) > ENROLLMENT_MAX_LENGTH:
        return RowResult.fail(row_number, f"Enrollment number longer than {ENROLLMENT_MAX_LENGTH} characters",
                              key=enrollment_no)
    raw_name = cell(row, NAME_COLUMN)
    if not raw_name:
        return RowResult.fail(row_number, f"Missing student name ({NAME_COLUMN})", key=enrollment_no)
    code = cell(row, DEPARTMENT_COLUMN)
    if not code:
        return RowResult.fail(row_number, f"Missing department code ({DEPARTMENT_COLUMN})", key=enrollment_no)

    department = resolver.resolve(code)
    if department is None:
        return RowResult.warn(row_number, f"Unknown department code {code!r}; row skipped", key=enrollment_no)
    try:
        program_semesters = resolve_program_semesters(department.program_semesters, max_semester)
    except ValueError as exc:
        return RowResult.fail(row_number, str(exc), key=enrollment_no)
    if program_semesters is None:
        return RowResult.fail(
            row_number,
            f"Program length unknown for department {department.code}; set it on the department "
            f"or pass a max semester for the run",
            key=enrollment_no,
        )

    admission_year = derive_admission_year(enrollment_no, today)
    flags = {field: parse_boolean_flag(row.get(column)) for field, column in FLAG_COLUMNS.items()}
    personal_email = cell(row, "Email")
    codes = {n: row.get(SEMESTER_COLUMN.format(n=n)) for n in range(1, SEMESTER_SLOTS + 1)}
    return RowResult.ok(row_number, RosterCandidate(
        enrollment_no=enrollment_no,
        department=department,
        names=parse_full_name(raw_name),
        full_name=" ".join(raw_name.split()),
        institutional_email=derive_institutional_email(enrollment_no),
        personal_email=personal_email if personal_email and "@" in personal_email else None,
        admission_year=admission_year,
        batch=derive_batch_range(admission_year, program_semesters),
        program_semesters=program_semesters,
        semester_status={k: str(v) for k, v in semester_status_map(codes).items()},
        gender=cell(row, "Gender"),
        birth_date=parse_excel_date(cell(row, "DOB")),
        category=cell(row, "Category"),
        mobile=cell(row, "Mobile"),
        flags=flags,
        status=_roster_status(cell(row, "Status"), flags),
    ))


def _student_user(candidate):
    user, created = User.objects.get_or_create(
        username=candidate.enrollment_no.lower(),
        defaults={
            "email": candidate.institutional_email,
            "first_name": candidate.names.first[:150],
            "last_name": candidate.names.last[:150],
        },
    )
    if created:
        user.set_unusable_password()
        user.save(update_fields=["password"])
    return user


def _sync_user(user, candidate, student_group):
    wanted = {
        "email": candidate.institutional_email,
        "first_name": candidate.names.first[:150],
        "last_name": candidate.names.last[:150],
    }
    changed = [name for name, value in wanted.items() if getattr(user, name) != value]
    if changed:
        for name in changed:
            setattr(user, name, wanted[name])
        user.save(update_fields=changed)
    user.groups.add(student_group)


def write_student(candidate, student_group):
    with transaction.atomic():
        student = StudentRecord.objects.select_for_update().filter(enrollment_no=candidate.enrollment_no).first()
        user = student.user if student is not None and student.user_id else _student_user(candidate)
        _sync_user(user, candidate, student_group)
        fields = candidate.record_fields()
        if student is None:
            StudentRecord.objects.create(enrollment_no=candidate.enrollment_no, user=user, **fields)
            return WriteStatus.CREATED
        for name, value in fields.items():
            setattr(student, name, value)
        student.user = user
        student.save()
        return WriteStatus.UPDATED


def import_roster(content, filename=None, *, max_semester=None, user=None, cancel_event=None,
                  batch_size=None, workers=None, today=None):
    """Import a student roster extract and return its ImportReport.

    ``max_semester`` is the run-level program length used for departments
    that do not carry their own; rows of such departments fail without it.
    """
    started_at = timezone.now()
    report = ImportReport(kind=ImportRunKind.ROSTER.value, source_name=filename)
    try:
        rows = decode_tabular(content, filename)
    except StructuralError as exc:
        record_run(report, started_at=started_at, user=user, failed=True, message=str(exc))
        raise
    report.total_rows = len(rows)
    logger.info("Importing %s roster rows from %s", len(rows), filename or "<text>")

    resolver = DepartmentResolver()
    resolver.prime(row.get(DEPARTMENT_COLUMN) for row in rows)
    student_group, _ = Group.objects.get_or_create(name=ingest_setting("STUDENT_GROUP"))
    staged = [
        normalize_roster_row(row, number, resolver, max_semester=max_semester, today=today)
        for number, row in enumerate(rows, start=1)
    ]
    orchestrator = UpsertOrchestrator(
        partial(write_student, student_group=student_group),
        batch_size=batch_size, workers=workers, cancel_event=cancel_event,
    )
    try:
        orchestrator.run(staged, report)
    except PersistenceError as exc:
        record_run(report, started_at=started_at, user=user, failed=True, message=str(exc))
        raise

    record_run(report, started_at=started_at, user=user)
    logger.info("Roster import: %s created, %s updated, %s errors, %s warnings",
                report.created_count, report.updated_count, len(report.errors), len(report.warnings))
    return report
