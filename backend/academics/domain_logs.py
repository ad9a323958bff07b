from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

__all__ = [
    'ImportRunKind', 'ImportRunStatus', 'ImportRunLog'
]


class ImportRunKind(models.TextChoices):
    RESULTS = 'results', 'Exam results'
    ROSTER = 'roster', 'Student roster'
    ROLE_SYNC = 'role_sync', 'Student role sync'


class ImportRunStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    PARTIAL = 'partial', 'Completed with row errors'
    CANCELLED = 'cancelled', 'Cancelled'
    FAILED = 'failed', 'Failed'


class ImportRunLog(models.Model):
    """Audit row written once per ingestion run.

    Row-level detail is truncated to the configured limit; the full report is
    returned to the caller.
    """
    id = models.BigAutoField(primary_key=True)
    kind = models.CharField(max_length=20, choices=ImportRunKind.choices, db_column='kind')
    batch_id = models.CharField(max_length=64, null=True, blank=True, db_index=True, db_column='batch_id')
    source_name = models.CharField(max_length=255, null=True, blank=True, db_column='source_name')
    total_rows = models.IntegerField(default=0, db_column='total_rows')
    processed_count = models.IntegerField(default=0, db_column='processed_count')
    created_count = models.IntegerField(default=0, db_column='created_count')
    updated_count = models.IntegerField(default=0, db_column='updated_count')
    duplicate_count = models.IntegerField(default=0, db_column='duplicate_count')
    error_count = models.IntegerField(default=0, db_column='error_count')
    warning_count = models.IntegerField(default=0, db_column='warning_count')
    status = models.CharField(max_length=20, choices=ImportRunStatus.choices, db_column='status')
    errors = models.JSONField(blank=True, null=True, db_column='errors')
    warnings = models.JSONField(blank=True, null=True, db_column='warnings')
    message = models.TextField(blank=True, null=True, db_column='message')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, db_column='created_by')
    started_at = models.DateTimeField(default=timezone.now, db_column='started_at')
    finished_at = models.DateTimeField(null=True, blank=True, db_column='finished_at')

    class Meta:
        db_table = 'import_run_log'
        ordering = ['-started_at']

    def __str__(self):
        return f"{self.kind} run {self.batch_id or self.pk} ({self.status}) @ {self.started_at}"
