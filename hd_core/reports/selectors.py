# backend/hd_core/reports/selectors.py
from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hd_core.common.filters import apply_filterset
from hd_core.common.scope import KIND_REPORTS, Caller, apply_scope, assert_record_in_scope
from hd_core.reports.filters import AggregateReportFilter, HealthDataReportFilter
from hd_core.reports.models import HealthDataReport, ReportStatus


def scoped_reports(
    *,
    caller: Caller,
    filters: Mapping[str, Any] | None = None,
    filterset_class=HealthDataReportFilter,
) -> QuerySet[HealthDataReport]:
    """
    Reports visible to the caller, narrowed by explicit filters.
    A filter can only narrow the scope, never widen it.
    """
    qs = apply_scope(HealthDataReport.objects.all(), caller, KIND_REPORTS)
    return apply_filterset(filterset_class, qs, filters)


def approved_reports(*, caller: Caller, filters: Mapping[str, Any] | None = None) -> QuerySet[HealthDataReport]:
    # status is not an aggregate filter; approval is forced
    qs = scoped_reports(caller=caller, filters=filters, filterset_class=AggregateReportFilter)
    return qs.filter(status=ReportStatus.APPROVED)


def list_reports(*, caller: Caller, filters: Mapping[str, Any] | None = None) -> QuerySet[HealthDataReport]:
    return (
        scoped_reports(caller=caller, filters=filters)
        .select_related("facility", "department", "submitted_by", "submitted_by__hd_profile")
        .order_by("-submitted_at")
    )


def report_by_id(*, report_id: UUID) -> HealthDataReport:
    try:
        return HealthDataReport.objects.select_related("facility", "department", "submitted_by").get(id=report_id)
    except (HealthDataReport.DoesNotExist, ValueError):
        raise NotFound("Health data report not found")


def report_for_caller(
    *,
    caller: Caller,
    report_id: UUID,
    message: str = "Not authorized to access this report",
) -> HealthDataReport:
    """404 when absent, 403 when outside the caller's scope."""
    report = report_by_id(report_id=report_id)
    assert_record_in_scope(caller, report, KIND_REPORTS, message)
    return report
