# backend/hd_core/reports/admin.py
from __future__ import annotations

from django.contrib import admin

from hd_core.reports.models import HealthDataReport


@admin.register(HealthDataReport)
class HealthDataReportAdmin(admin.ModelAdmin):
    list_display = ("facility", "department", "year", "month", "status", "submitted_at")
    list_filter = ("status", "state", "district", "year")
    search_fields = ("facility__name", "department__name", "district", "state")
    readonly_fields = ("id", "created_at", "updated_at", "last_updated_at")
    raw_id_fields = (
        "facility",
        "department",
        "submitted_by",
        "reviewed_by",
        "approved_by",
        "rejected_by",
        "last_updated_by",
    )
    date_hierarchy = "submitted_at"
