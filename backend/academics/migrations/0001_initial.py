from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

import academics.domain_student


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('code', models.CharField(db_column='code', max_length=20, unique=True)),
                ('name', models.CharField(db_column='name', max_length=255)),
                ('description', models.TextField(blank=True, db_column='description', null=True)),
                ('program_semesters', models.PositiveSmallIntegerField(blank=True, db_column='program_semesters', null=True)),
                ('is_active', models.BooleanField(db_column='is_active', default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='created_at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='updated_at')),
            ],
            options={
                'db_table': 'department',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='EnrollmentSequence',
            fields=[
                ('year', models.PositiveIntegerField(db_column='year', primary_key=True, serialize=False)),
                ('last_value', models.PositiveIntegerField(db_column='last_value', default=0)),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='updated_at')),
            ],
            options={
                'db_table': 'enrollment_sequence',
            },
        ),
        migrations.CreateModel(
            name='ExamResult',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('enrollment_no', models.CharField(db_column='enrollment_no', db_index=True, max_length=20)),
                ('st_id', models.CharField(blank=True, db_column='st_id', default='', max_length=50)),
                ('exam_id', models.IntegerField(db_column='exam_id')),
                ('exam_type', models.CharField(blank=True, db_column='exam_type', default='', max_length=50)),
                ('exam_name', models.CharField(blank=True, db_column='exam_name', default='', max_length=255)),
                ('declaration_date', models.DateField(blank=True, db_column='declaration_date', null=True)),
                ('academic_year', models.CharField(blank=True, db_column='academic_year', default='', max_length=20)),
                ('semester', models.IntegerField(db_column='semester', default=0)),
                ('map_number', models.FloatField(db_column='map_number', default=0)),
                ('unit_no', models.FloatField(db_column='unit_no', default=0)),
                ('exam_number', models.FloatField(db_column='exam_number', default=0)),
                ('student_name', models.CharField(blank=True, db_column='student_name', default='', max_length=255)),
                ('inst_code', models.IntegerField(db_column='inst_code', default=0)),
                ('inst_name', models.CharField(blank=True, db_column='inst_name', default='', max_length=255)),
                ('course_name', models.CharField(blank=True, db_column='course_name', default='', max_length=255)),
                ('branch_code', models.IntegerField(db_column='branch_code', default=0)),
                ('branch_name', models.CharField(blank=True, db_column='branch_name', default='', max_length=255)),
                ('subjects', models.JSONField(blank=True, db_column='subjects', default=list)),
                ('total_credits', models.IntegerField(db_column='total_credits', default=0)),
                ('earned_credits', models.IntegerField(db_column='earned_credits', default=0)),
                ('spi', models.FloatField(db_column='spi', default=0)),
                ('cpi', models.FloatField(db_column='cpi', default=0)),
                ('cgpa', models.FloatField(db_column='cgpa', default=0)),
                ('result', models.CharField(blank=True, db_column='result', default='', max_length=20)),
                ('trials', models.IntegerField(db_column='trials', default=1)),
                ('remark', models.CharField(blank=True, db_column='remark', default='', max_length=255)),
                ('upload_batch', models.CharField(blank=True, db_column='upload_batch', db_index=True, max_length=64, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='created_at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='updated_at')),
            ],
            options={
                'db_table': 'exam_result',
                'ordering': ['enrollment_no', 'exam_id'],
                'indexes': [
                    models.Index(fields=['branch_name', 'semester'], name='idx_result_branch_sem'),
                    models.Index(fields=['academic_year'], name='idx_result_academic_year'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('enrollment_no', 'exam_id'), name='uniq_result_enrollment_exam'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ImportRunLog',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('results', 'Exam results'), ('roster', 'Student roster'), ('role_sync', 'Student role sync')], db_column='kind', max_length=20)),
                ('batch_id', models.CharField(blank=True, db_column='batch_id', db_index=True, max_length=64, null=True)),
                ('source_name', models.CharField(blank=True, db_column='source_name', max_length=255, null=True)),
                ('total_rows', models.IntegerField(db_column='total_rows', default=0)),
                ('processed_count', models.IntegerField(db_column='processed_count', default=0)),
                ('created_count', models.IntegerField(db_column='created_count', default=0)),
                ('updated_count', models.IntegerField(db_column='updated_count', default=0)),
                ('duplicate_count', models.IntegerField(db_column='duplicate_count', default=0)),
                ('error_count', models.IntegerField(db_column='error_count', default=0)),
                ('warning_count', models.IntegerField(db_column='warning_count', default=0)),
                ('status', models.CharField(choices=[('completed', 'Completed'), ('partial', 'Completed with row errors'), ('cancelled', 'Cancelled'), ('failed', 'Failed')], db_column='status', max_length=20)),
                ('errors', models.JSONField(blank=True, db_column='errors', null=True)),
                ('warnings', models.JSONField(blank=True, db_column='warnings', null=True)),
                ('message', models.TextField(blank=True, db_column='message', null=True)),
                ('started_at', models.DateTimeField(db_column='started_at', default=django.utils.timezone.now)),
                ('finished_at', models.DateTimeField(blank=True, db_column='finished_at', null=True)),
                ('created_by', models.ForeignKey(blank=True, db_column='created_by', null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'import_run_log',
                'ordering': ['-started_at'],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('requested_enrollment_no', models.CharField(blank=True, db_column='requested_enrollment_no', max_length=20, null=True)),
                ('phone', models.CharField(blank=True, db_column='phone', max_length=20, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='created_at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='updated_at')),
                ('department', models.ForeignKey(blank=True, db_column='department_id', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='user_profiles', to='academics.department')),
                ('user', models.OneToOneField(db_column='user_id', on_delete=django.db.models.deletion.CASCADE, related_name='academic_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_profile',
            },
        ),
        migrations.CreateModel(
            name='StudentRecord',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('enrollment_no', models.CharField(db_column='enrollment_no', max_length=20, unique=True)),
                ('first_name', models.CharField(blank=True, db_column='first_name', default='', max_length=100)),
                ('middle_name', models.CharField(blank=True, db_column='middle_name', default='', max_length=100)),
                ('last_name', models.CharField(blank=True, db_column='last_name', default='', max_length=100)),
                ('full_name', models.CharField(blank=True, db_column='full_name', db_index=True, default='', max_length=255)),
                ('institutional_email', models.EmailField(db_column='institutional_email', max_length=254, unique=True)),
                ('personal_email', models.EmailField(blank=True, db_column='personal_email', max_length=254, null=True)),
                ('admission_year', models.PositiveIntegerField(db_column='admission_year')),
                ('batch', models.CharField(blank=True, db_column='batch', default='', max_length=20)),
                ('program_semesters', models.PositiveSmallIntegerField(db_column='program_semesters')),
                ('semester_status', models.JSONField(db_column='semester_status', default=academics.domain_student.empty_semester_status)),
                ('current_semester', models.PositiveSmallIntegerField(db_column='current_semester', default=1)),
                ('gender', models.CharField(blank=True, db_column='gender', max_length=20, null=True)),
                ('birth_date', models.DateField(blank=True, db_column='birth_date', null=True)),
                ('category', models.CharField(blank=True, db_column='category', max_length=50, null=True)),
                ('mobile', models.CharField(blank=True, db_column='mobile', max_length=20, null=True)),
                ('is_complete', models.BooleanField(db_column='is_complete', default=False)),
                ('term_close', models.BooleanField(db_column='term_close', default=False)),
                ('is_cancel', models.BooleanField(db_column='is_cancel', default=False)),
                ('is_pass_all', models.BooleanField(db_column='is_pass_all', default=False)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('graduated', 'Graduated'), ('transferred', 'Transferred'), ('dropped', 'Dropped')], db_column='status', default='active', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='created_at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='updated_at')),
                ('department', models.ForeignKey(db_column='department_id', on_delete=django.db.models.deletion.PROTECT, related_name='students', to='academics.department')),
                ('user', models.OneToOneField(blank=True, db_column='user_id', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='student_record', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'student_record',
                'ordering': ['enrollment_no'],
                'indexes': [
                    models.Index(fields=['department', 'current_semester'], name='idx_student_dept_sem'),
                    models.Index(fields=['admission_year'], name='idx_student_admission'),
                ],
            },
        ),
    ]
