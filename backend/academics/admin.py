from django.contrib import admin

from .domain_department import Department, UserProfile
from .domain_logs import ImportRunLog
from .domain_result import ExamResult
from .domain_student import EnrollmentSequence, StudentRecord


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'program_semesters', 'is_active')
    search_fields = ('code', 'name')
    list_filter = ('is_active', 'program_semesters')

@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'department', 'requested_enrollment_no', 'phone')
    search_fields = ('user__username', 'user__email', 'requested_enrollment_no')
    list_filter = ('department',)

@admin.register(StudentRecord)
class StudentRecordAdmin(admin.ModelAdmin):
    list_display = ('enrollment_no', 'full_name', 'department', 'batch', 'current_semester', 'status')
    search_fields = ('enrollment_no', 'full_name', 'institutional_email')
    list_filter = ('department', 'status', 'admission_year', 'current_semester')
    # derived on save
    readonly_fields = ('current_semester', 'created_at', 'updated_at')

    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        if obj is not None:
            return fields + ('enrollment_no',)
        return fields

@admin.register(EnrollmentSequence)
class EnrollmentSequenceAdmin(admin.ModelAdmin):
    list_display = ('year', 'last_value', 'updated_at')

@admin.register(ExamResult)
class ExamResultAdmin(admin.ModelAdmin):
    list_display = ('enrollment_no', 'exam_id', 'exam_name', 'branch_name', 'semester', 'spi', 'result', 'upload_batch')
    search_fields = ('enrollment_no', 'st_id', 'student_name', 'upload_batch')
    list_filter = ('academic_year', 'semester', 'result', 'branch_name')

@admin.register(ImportRunLog)
class ImportRunLogAdmin(admin.ModelAdmin):
    list_display = ('kind', 'status', 'batch_id', 'source_name', 'total_rows', 'processed_count', 'error_count', 'started_at')
    search_fields = ('batch_id', 'source_name')
    list_filter = ('kind', 'status')
    readonly_fields = [f.name for f in ImportRunLog._meta.fields]
