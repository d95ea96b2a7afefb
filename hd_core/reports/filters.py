# backend/hd_core/reports/filters.py
from __future__ import annotations

import django_filters

from hd_core.reports.models import HealthDataReport, ReportStatus


class AggregateReportFilter(django_filters.FilterSet):
    """Period + geography filters shared by listing and rollups."""

    year = django_filters.NumberFilter(field_name="year")
    month = django_filters.NumberFilter(field_name="month")
    quarter = django_filters.NumberFilter(field_name="quarter")
    facility = django_filters.UUIDFilter(field_name="facility_id")
    department = django_filters.UUIDFilter(field_name="department_id")
    district = django_filters.CharFilter(field_name="district")
    state = django_filters.CharFilter(field_name="state")

    class Meta:
        model = HealthDataReport
        fields = ["year", "month", "quarter", "facility", "department", "district", "state"]


class HealthDataReportFilter(AggregateReportFilter):
    status = django_filters.ChoiceFilter(field_name="status", choices=ReportStatus.choices)

    class Meta(AggregateReportFilter.Meta):
        fields = AggregateReportFilter.Meta.fields + ["status"]
