import threading
from concurrent.futures import ThreadPoolExecutor

from django.core.exceptions import ValidationError
from django.db import connection
from django.test import TestCase, TransactionTestCase

from ..derivation import SemesterStatus
from ..domain_department import Department
from ..domain_student import EnrollmentSequence, StudentRecord
from ..enrollment import (
    allocate_enrollment_no,
    create_with_allocated_enrollment,
    format_enrollment_no,
    highest_existing_sequence,
)


def make_student(department, enrollment_no, **extra):
    fields = {
        "department": department,
        "full_name": "Test Student",
        "institutional_email": f"{enrollment_no.lower()}@students.test.edu",
        "admission_year": 2025,
        "program_semesters": 8,
    }
    fields.update(extra)
    return StudentRecord.objects.create(enrollment_no=enrollment_no, **fields)


class EnrollmentAllocatorTests(TestCase):
    def setUp(self):
        self.dept = Department.objects.create(code="CE", name="Computer Engineering", program_semesters=8)

    def test_sequential_numbers_per_year(self):
        self.assertEqual(allocate_enrollment_no(2025), "20250001")
        self.assertEqual(allocate_enrollment_no(2025), "20250002")
        self.assertEqual(allocate_enrollment_no(2024), "20240001")
        self.assertEqual(EnrollmentSequence.objects.get(year=2025).last_value, 2)

    def test_counter_seeded_from_existing_numbers(self):
        make_student(self.dept, "20250041")
        make_student(self.dept, "20250007")
        self.assertEqual(highest_existing_sequence(2025), 41)
        self.assertEqual(allocate_enrollment_no(2025), "20250042")

    def test_collision_resyncs_and_retries(self):
        self.assertEqual(allocate_enrollment_no(2025), "20250001")
        # inserted behind the counter's back
        make_student(self.dept, "20250002")
        make_student(self.dept, "20250003")
        student = create_with_allocated_enrollment(lambda no: make_student(self.dept, no), year=2025)
        self.assertEqual(student.enrollment_no, "20250004")


class ConcurrentAllocationTests(TransactionTestCase):
    workers = 4
    per_worker = 5

    def test_parallel_callers_never_share_a_number(self):
        ready = threading.Barrier(self.workers)

        def allocate_many(_):
            try:
                ready.wait()
                return [allocate_enrollment_no(2025) for _ in range(self.per_worker)]
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            numbers = [no for batch in pool.map(allocate_many, range(self.workers)) for no in batch]

        total = self.workers * self.per_worker
        self.assertEqual(len(set(numbers)), total)
        self.assertEqual(sorted(numbers), [format_enrollment_no(2025, n) for n in range(1, total + 1)])
        self.assertEqual(EnrollmentSequence.objects.get(year=2025).last_value, total)


class StudentRecordModelTests(TestCase):
    def setUp(self):
        self.dept = Department.objects.create(code="me", name="Mechanical Engineering")

    def test_department_code_is_uppercased(self):
        self.assertEqual(Department.objects.get(pk=self.dept.pk).code, "ME")

    def test_program_length_is_required(self):
        self.assertFalse(StudentRecord._meta.get_field("program_semesters").has_default())
        with self.assertRaises(ValueError):
            make_student(self.dept, "20250001", program_semesters=None)
        self.assertFalse(StudentRecord.objects.exists())

    def test_current_semester_is_recomputed_on_save(self):
        student = make_student(self.dept, "20250001", current_semester=5)
        self.assertEqual(student.current_semester, 1)
        student.semester_status = {"sem1": SemesterStatus.CLEARED, "sem2": SemesterStatus.PENDING}
        student.save(update_fields=["semester_status"])
        student.refresh_from_db()
        self.assertEqual(student.current_semester, 3)
        self.assertEqual(student.semester_status["sem8"], "NOT_ATTEMPTED")

    def test_enrollment_number_is_immutable(self):
        make_student(self.dept, "20250001")
        student = StudentRecord.objects.get(enrollment_no="20250001")
        student.enrollment_no = "20250099"
        with self.assertRaises(ValidationError):
            student.save()
        fresh = make_student(self.dept, "20250002")
        fresh.enrollment_no = "20250003"
        with self.assertRaises(ValidationError):
            fresh.save()
