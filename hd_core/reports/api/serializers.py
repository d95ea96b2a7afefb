# backend/hd_core/reports/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hd_core.reports.indicators import validate_indicators
from hd_core.reports.models import HealthDataReport, ReportStatus


class _Ref(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class HealthDataReportSerializer(serializers.ModelSerializer):
    facility = _Ref(read_only=True)
    department = _Ref(read_only=True)
    submitted_by = serializers.SerializerMethodField()

    class Meta:
        model = HealthDataReport
        fields = [
            "id",
            "facility",
            "department",
            "district",
            "state",
            "year",
            "month",
            "quarter",
            "indicators",
            "status",
            "notes",
            "submitted_by",
            "submitted_at",
            "reviewed_by",
            "reviewed_at",
            "approved_by",
            "approved_at",
            "rejected_by",
            "rejected_at",
            "last_updated_by",
            "last_updated_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_submitted_by(self, obj):
        u = obj.submitted_by
        profile = getattr(u, "hd_profile", None)
        return {"id": u.pk, "email": u.email, "name": profile.name if profile else u.get_username()}


class _IndicatorsMixin:
    def validate_indicators(self, value):
        return validate_indicators(value)


class HealthDataReportCreateSerializer(_IndicatorsMixin, serializers.Serializer):
    facility = serializers.UUIDField()
    department = serializers.UUIDField()
    year = serializers.IntegerField(min_value=1900, max_value=9999)
    month = serializers.IntegerField(min_value=1, max_value=12)
    quarter = serializers.IntegerField(min_value=1, max_value=4, required=False, allow_null=True)
    indicators = serializers.JSONField(required=False)
    status = serializers.ChoiceField(choices=ReportStatus.choices, default=ReportStatus.DRAFT)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class HealthDataReportUpdateSerializer(_IndicatorsMixin, serializers.Serializer):
    year = serializers.IntegerField(min_value=1900, max_value=9999, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    quarter = serializers.IntegerField(min_value=1, max_value=4, required=False, allow_null=True)
    indicators = serializers.JSONField(required=False)
    status = serializers.ChoiceField(choices=ReportStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class AggregateRowSerializer(serializers.Serializer):
    """Documentation only; rows are built as plain dicts."""
    district = serializers.CharField()
    state = serializers.CharField()
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    maternalHealth = serializers.DictField(child=serializers.IntegerField())
    childHealth = serializers.DictField(child=serializers.IntegerField())
    diseaseControl = serializers.DictField(child=serializers.IntegerField())
    outpatientServices = serializers.DictField(child=serializers.IntegerField())
    inpatientServices = serializers.DictField(child=serializers.IntegerField())
    surgicalProcedures = serializers.DictField(child=serializers.IntegerField())
    laboratoryServices = serializers.DictField(child=serializers.IntegerField())
    resources = serializers.DictField(child=serializers.FloatField())
    facilitiesReporting = serializers.IntegerField()
