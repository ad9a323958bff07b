"""Domain Department Models
Department, UserProfile
"""
from django.contrib.auth.models import User
from django.db import models

__all__ = [
    'Department', 'UserProfile'
]


class Department(models.Model):
    """Academic department referenced by roster extracts through its code.

    Imports only ever look departments up; they are maintained through the admin.
    """
    id = models.BigAutoField(primary_key=True)
    code = models.CharField(max_length=20, unique=True, db_column='code')
    name = models.CharField(max_length=255, db_column='name')
    description = models.TextField(null=True, blank=True, db_column='description')
    # 6 for diploma programs, 8 for degree programs; unknown until configured
    program_semesters = models.PositiveSmallIntegerField(null=True, blank=True, db_column='program_semesters')
    is_active = models.BooleanField(default=True, db_column='is_active')
    created_at = models.DateTimeField(auto_now_add=True, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'department'
        ordering = ['code']

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.code} - {self.name}"


class UserProfile(models.Model):
    """Academic profile of a signed-up user, consumed by the student role sync."""
    id = models.BigAutoField(primary_key=True)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='academic_profile', db_column='user_id')
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, db_column='department_id', related_name='user_profiles')
    requested_enrollment_no = models.CharField(max_length=20, null=True, blank=True, db_column='requested_enrollment_no')
    phone = models.CharField(max_length=20, null=True, blank=True, db_column='phone')
    created_at = models.DateTimeField(auto_now_add=True, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'user_profile'

    def __str__(self):
        return f"Profile for {self.user.username}"
