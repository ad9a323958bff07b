"""Domain Student Models
StudentRecord, EnrollmentSequence
"""
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models

from .derivation import ENROLLMENT_MAX_LENGTH, SEMESTER_SLOTS, SemesterStatus, derive_current_semester, semester_key
from .domain_department import Department

__all__ = [
    'StudentStatus', 'StudentRecord', 'EnrollmentSequence'
]


class StudentStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    GRADUATED = 'graduated', 'Graduated'
    TRANSFERRED = 'transferred', 'Transferred'
    DROPPED = 'dropped', 'Dropped'


def empty_semester_status():
    return {semester_key(n): SemesterStatus.NOT_ATTEMPTED.value for n in range(1, SEMESTER_SLOTS + 1)}


class StudentRecord(models.Model):
    """A student keyed by enrollment number.

    ``current_semester`` is never written directly: it is recomputed from
    ``semester_status`` and ``program_semesters`` on every save. The
    enrollment number cannot change once the row exists.
    """
    id = models.BigAutoField(primary_key=True)
    enrollment_no = models.CharField(max_length=ENROLLMENT_MAX_LENGTH, unique=True, db_column='enrollment_no')
    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, db_column='user_id', related_name='student_record')
    department = models.ForeignKey(Department, on_delete=models.PROTECT, db_column='department_id', related_name='students')
    first_name = models.CharField(max_length=100, blank=True, default='', db_column='first_name')
    middle_name = models.CharField(max_length=100, blank=True, default='', db_column='middle_name')
    last_name = models.CharField(max_length=100, blank=True, default='', db_column='last_name')
    full_name = models.CharField(max_length=255, blank=True, default='', db_index=True, db_column='full_name')
    institutional_email = models.EmailField(unique=True, db_column='institutional_email')
    personal_email = models.EmailField(null=True, blank=True, db_column='personal_email')
    admission_year = models.PositiveIntegerField(db_column='admission_year')
    batch = models.CharField(max_length=20, blank=True, default='', db_column='batch')
    program_semesters = models.PositiveSmallIntegerField(db_column='program_semesters')
    semester_status = models.JSONField(default=empty_semester_status, db_column='semester_status')
    current_semester = models.PositiveSmallIntegerField(default=1, db_column='current_semester')
    gender = models.CharField(max_length=20, null=True, blank=True, db_column='gender')
    birth_date = models.DateField(null=True, blank=True, db_column='birth_date')
    category = models.CharField(max_length=50, null=True, blank=True, db_column='category')
    mobile = models.CharField(max_length=20, null=True, blank=True, db_column='mobile')
    is_complete = models.BooleanField(default=False, db_column='is_complete')
    term_close = models.BooleanField(default=False, db_column='term_close')
    is_cancel = models.BooleanField(default=False, db_column='is_cancel')
    is_pass_all = models.BooleanField(default=False, db_column='is_pass_all')
    status = models.CharField(max_length=20, choices=StudentStatus.choices, default=StudentStatus.ACTIVE, db_column='status')
    created_at = models.DateTimeField(auto_now_add=True, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'student_record'
        ordering = ['enrollment_no']
        indexes = [
            models.Index(fields=['department', 'current_semester'], name='idx_student_dept_sem'),
            models.Index(fields=['admission_year'], name='idx_student_admission'),
        ]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_enrollment_no = dict(zip(field_names, values)).get('enrollment_no')
        return instance

    def save(self, *args, **kwargs):
        stored = getattr(self, '_stored_enrollment_no', None)
        if self.pk and stored and stored != self.enrollment_no:
            raise ValidationError({'enrollment_no': f"Enrollment number {stored} cannot be changed once assigned."})
        status_map = empty_semester_status()
        status_map.update(self.semester_status or {})
        self.semester_status = status_map
        self.current_semester = derive_current_semester(status_map, self.program_semesters)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'semester_status' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'current_semester'}
        super().save(*args, **kwargs)
        self._stored_enrollment_no = self.enrollment_no

    def __str__(self):
        return f"{self.enrollment_no} - {self.full_name or '-'}"


class EnrollmentSequence(models.Model):
    """Per-admission-year counter behind generated enrollment numbers."""
    year = models.PositiveIntegerField(primary_key=True, db_column='year')
    last_value = models.PositiveIntegerField(default=0, db_column='last_value')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'enrollment_sequence'

    def __str__(self):
        return f"{self.year}: {self.last_value:04d}"
