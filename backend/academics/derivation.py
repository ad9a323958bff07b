"""Derived-field rules shared by every import path.

Everything here is a pure function of its arguments (plus the configured
email domain when none is passed), so the same raw values always derive the
same stored values.
"""
import math
import re
from collections import namedtuple
from datetime import date

from django.db import models

from .conf import ingest_setting

__all__ = [
    'SEMESTER_SLOTS', 'ENROLLMENT_MAX_LENGTH', 'SemesterStatus', 'NameParts',
    'derive_semester_status', 'derive_current_semester', 'derive_admission_year',
    'derive_institutional_email', 'parse_full_name', 'parse_boolean_flag',
    'semester_status_map', 'semester_key', 'derive_batch_range', 'resolve_program_semesters',
]

SEMESTER_SLOTS = 8
ENROLLMENT_MAX_LENGTH = 20
ADMISSION_YEAR_RANGE = (2000, 2030)
TRUTHY_FLAGS = {"1", "true", "yes"}

_FOUR_DIGITS = re.compile(r"^[0-9]{4}$")
_TWO_DIGITS = re.compile(r"^[0-9]{2}$")


class SemesterStatus(models.TextChoices):
    CLEARED = 'CLEARED', 'Cleared'
    PENDING = 'PENDING', 'Pending'
    NOT_ATTEMPTED = 'NOT_ATTEMPTED', 'Not attempted'


NameParts = namedtuple('NameParts', ['first', 'middle', 'last'])


def semester_key(number):
    return f"sem{number}"


def derive_semester_status(raw_code):
    """Map a roster semester code to a status: 2 cleared, 1 pending, else not attempted."""
    if raw_code is None:
        return SemesterStatus.NOT_ATTEMPTED
    text = str(raw_code).strip()
    if not text:
        return SemesterStatus.NOT_ATTEMPTED
    try:
        value = float(text)
    except ValueError:
        return SemesterStatus.NOT_ATTEMPTED
    if value == 2:
        return SemesterStatus.CLEARED
    if value == 1:
        return SemesterStatus.PENDING
    return SemesterStatus.NOT_ATTEMPTED


def derive_current_semester(status_map, max_semester):
    """Return the semester a student is currently in.

    Scans from ``max_semester`` down to 1; the highest semester that was
    cleared or is pending means the student sits in the next one (capped at
    ``max_semester``). With nothing attempted the student is in semester 1.
    ``status_map`` may be keyed by semester number or by ``semN``.
    """
    max_semester = _validate_program_length(max_semester)
    status_map = status_map or {}
    for number in range(max_semester, 0, -1):
        status = status_map.get(number, status_map.get(semester_key(number)))
        if status in (SemesterStatus.CLEARED, SemesterStatus.PENDING):
            return min(number + 1, max_semester)
    return 1


def derive_admission_year(enrollment_no, today=None):
    value = (enrollment_no or "").strip()
    low, high = ADMISSION_YEAR_RANGE
    head = value[:4]
    if _FOUR_DIGITS.match(head) and low <= int(head) <= high:
        return int(head)
    short = value[:2]
    if _TWO_DIGITS.match(short):
        year = int("20" + short)
        if low <= year <= high:
            return year
    return (today or date.today()).year


def derive_institutional_email(enrollment_no, domain=None):
    domain = domain or ingest_setting("INSTITUTION_EMAIL_DOMAIN")
    return f"{(enrollment_no or '').strip().lower()}@{domain}"


def parse_full_name(raw):
    """Split a roster name written surname first.

    "Sharma Rahul" -> first Rahul, last Sharma; "Sharma Rahul Kumar" adds
    middle Kumar. One token is a first name; any other token count keeps the
    whole name as the first name.
    """
    tokens = (raw or "").split()
    if len(tokens) == 2:
        return NameParts(first=tokens[1], middle="", last=tokens[0])
    if len(tokens) == 3:
        return NameParts(first=tokens[1], middle=tokens[2], last=tokens[0])
    return NameParts(first=" ".join(tokens), middle="", last="")


def parse_boolean_flag(raw):
    if raw is None:
        return False
    return str(raw).strip().lower() in TRUTHY_FLAGS


def semester_status_map(codes, slots=SEMESTER_SLOTS):
    """Build the stored ``sem1..semN`` map from raw codes keyed by semester number."""
    codes = codes or {}
    return {semester_key(n): derive_semester_status(codes.get(n)) for n in range(1, slots + 1)}


def derive_batch_range(admission_year, program_semesters):
    years = math.ceil(_validate_program_length(program_semesters) / 2)
    return f"{admission_year}-{admission_year + years}"


def resolve_program_semesters(department_value, fallback=None):
    """Pick the program length: the department's own value, else the run-level one.

    Returns None when neither is known; callers must treat that as a row error
    rather than guess.
    """
    value = department_value or fallback
    if value is None:
        return None
    return _validate_program_length(value)


def _validate_program_length(value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Program length must be a whole number of semesters, got {value!r}") from None
    if not 1 <= number <= SEMESTER_SLOTS:
        raise ValueError(f"Program length must be between 1 and {SEMESTER_SLOTS} semesters, got {number}")
    return number
