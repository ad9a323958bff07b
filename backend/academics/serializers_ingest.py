from rest_framework import serializers


class RowFailureSerializer(serializers.Serializer):
    row = serializers.IntegerField()
    message = serializers.CharField()
    key = serializers.CharField(allow_null=True)


class ImportReportSerializer(serializers.Serializer):
    kind = serializers.CharField()
    status = serializers.CharField()
    batchId = serializers.CharField(source='batch_id', allow_null=True)
    importedCount = serializers.IntegerField(source='processed_count')
    totalRows = serializers.IntegerField(source='total_rows')
    createdCount = serializers.IntegerField(source='created_count')
    updatedCount = serializers.IntegerField(source='updated_count')
    duplicateCount = serializers.IntegerField(source='duplicate_count')
    cancelled = serializers.BooleanField()
    errors = RowFailureSerializer(many=True)
    warnings = RowFailureSerializer(many=True)


class BatchSummarySerializer(serializers.Serializer):
    batchId = serializers.CharField(source='batch_id')
    count = serializers.IntegerField()
    latestUpload = serializers.DateTimeField(source='latest_upload', allow_null=True)


class BatchDeletionSerializer(serializers.Serializer):
    batchId = serializers.CharField(source='batch_id')
    deletedCount = serializers.IntegerField(source='deleted_count')


class BranchAnalysisSerializer(serializers.Serializer):
    branch_name = serializers.CharField(allow_blank=True)
    semester = serializers.IntegerField()
    total_students = serializers.IntegerField()
    pass_count = serializers.IntegerField()
    distinction_count = serializers.IntegerField()
    first_class_count = serializers.IntegerField()
    second_class_count = serializers.IntegerField()
    average_spi = serializers.FloatField()
    average_cpi = serializers.FloatField()
    pass_percentage = serializers.FloatField()
