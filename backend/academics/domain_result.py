"""Domain Result Models
ExamResult
"""
from django.db import models

from .derivation import ENROLLMENT_MAX_LENGTH

__all__ = [
    'ExamResult'
]


class ExamResult(models.Model):
    """One student's result for one exam, imported from the university results extract.

    ``subjects`` is an ordered list of dicts (code, name, credits, grade,
    is_backlog and optional component grades); list position is the slot
    the subject is exported to. ``upload_batch`` tags the run that last wrote
    the row.
    """
    id = models.BigAutoField(primary_key=True)
    enrollment_no = models.CharField(max_length=ENROLLMENT_MAX_LENGTH, db_index=True, db_column='enrollment_no')
    st_id = models.CharField(max_length=50, blank=True, default='', db_column='st_id')
    exam_id = models.IntegerField(db_column='exam_id')
    exam_type = models.CharField(max_length=50, blank=True, default='', db_column='exam_type')
    exam_name = models.CharField(max_length=255, blank=True, default='', db_column='exam_name')
    declaration_date = models.DateField(null=True, blank=True, db_column='declaration_date')
    academic_year = models.CharField(max_length=20, blank=True, default='', db_column='academic_year')
    semester = models.IntegerField(default=0, db_column='semester')
    map_number = models.FloatField(default=0, db_column='map_number')
    unit_no = models.FloatField(default=0, db_column='unit_no')
    exam_number = models.FloatField(default=0, db_column='exam_number')
    student_name = models.CharField(max_length=255, blank=True, default='', db_column='student_name')
    inst_code = models.IntegerField(default=0, db_column='inst_code')
    inst_name = models.CharField(max_length=255, blank=True, default='', db_column='inst_name')
    course_name = models.CharField(max_length=255, blank=True, default='', db_column='course_name')
    branch_code = models.IntegerField(default=0, db_column='branch_code')
    branch_name = models.CharField(max_length=255, blank=True, default='', db_column='branch_name')
    subjects = models.JSONField(default=list, blank=True, db_column='subjects')
    total_credits = models.IntegerField(default=0, db_column='total_credits')
    earned_credits = models.IntegerField(default=0, db_column='earned_credits')
    spi = models.FloatField(default=0, db_column='spi')
    cpi = models.FloatField(default=0, db_column='cpi')
    cgpa = models.FloatField(default=0, db_column='cgpa')
    result = models.CharField(max_length=20, blank=True, default='', db_column='result')
    trials = models.IntegerField(default=1, db_column='trials')
    remark = models.CharField(max_length=255, blank=True, default='', db_column='remark')
    upload_batch = models.CharField(max_length=64, null=True, blank=True, db_index=True, db_column='upload_batch')
    created_at = models.DateTimeField(auto_now_add=True, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'exam_result'
        ordering = ['enrollment_no', 'exam_id']
        constraints = [
            models.UniqueConstraint(fields=['enrollment_no', 'exam_id'], name='uniq_result_enrollment_exam'),
        ]
        indexes = [
            models.Index(fields=['branch_name', 'semester'], name='idx_result_branch_sem'),
            models.Index(fields=['academic_year'], name='idx_result_academic_year'),
        ]

    @property
    def backlog_count(self):
        return sum(1 for subject in self.subjects or [] if subject.get('is_backlog'))

    def __str__(self):
        return f"{self.enrollment_no} / exam {self.exam_id}"
