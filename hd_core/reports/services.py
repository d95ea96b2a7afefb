# backend/hd_core/reports/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from hd_core.common.api.exceptions import ConflictError
from hd_core.common.db import save_or_conflict
from hd_core.common.scope import (
    KIND_REPORTS,
    REGIONAL_ADMIN_ROLES,
    Caller,
    assert_record_in_scope,
    strip_unauthorized_status,
)
from hd_core.facilities.selectors import department_by_id, facility_by_id
from hd_core.reports.indicators import empty_indicators
from hd_core.reports.models import HealthDataReport, ReportStatus
from hd_core.reports.selectors import report_for_caller

logger = logging.getLogger(__name__)

CREATE_STATUSES = {ReportStatus.DRAFT, ReportStatus.SUBMITTED}

# current -> statuses a regional admin may move it to
ADMIN_TRANSITIONS = {
    ReportStatus.DRAFT: {ReportStatus.SUBMITTED},
    ReportStatus.SUBMITTED: {ReportStatus.REVIEWED, ReportStatus.APPROVED, ReportStatus.REJECTED},
    ReportStatus.REVIEWED: {ReportStatus.APPROVED, ReportStatus.REJECTED},
    ReportStatus.REJECTED: {ReportStatus.SUBMITTED},
    ReportStatus.APPROVED: set(),
}

# facility-level roles can only hand in a draft
MEMBER_TRANSITIONS = {
    ReportStatus.DRAFT: {ReportStatus.SUBMITTED},
}

# status -> (actor field, timestamp field) stamped on entering it
STATUS_AUDIT_FIELDS = {
    ReportStatus.SUBMITTED: ("submitted_by_id", "submitted_at"),
    ReportStatus.REVIEWED: ("reviewed_by_id", "reviewed_at"),
    ReportStatus.APPROVED: ("approved_by_id", "approved_at"),
    ReportStatus.REJECTED: ("rejected_by_id", "rejected_at"),
}

EDITABLE_FIELDS = ("year", "month", "quarter", "indicators", "notes")


def _period_message(year: int, month: int) -> str:
    return f"A report for this facility and department already exists for {year}-{month:02d}."


def _validate_report(report: HealthDataReport) -> None:
    try:
        report.full_clean(validate_unique=False, validate_constraints=False)
    except DjangoValidationError as e:
        raise ValidationError(e.message_dict)


def _period_taken(report: HealthDataReport) -> bool:
    qs = HealthDataReport.objects.filter(
        facility_id=report.facility_id,
        department_id=report.department_id,
        year=report.year,
        month=report.month,
    )
    if not report._state.adding:
        qs = qs.exclude(id=report.id)
    return qs.exists()


def assert_transition_allowed(caller: Caller, current: str, new: str) -> None:
    table = ADMIN_TRANSITIONS if caller.role in REGIONAL_ADMIN_ROLES else MEMBER_TRANSITIONS
    if new not in table.get(current, set()):
        raise ValidationError({"status": f"Cannot change status from '{current}' to '{new}'."})


class HealthReportService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        caller: Caller,
        facility_id: UUID,
        department_id: UUID,
        year: int,
        month: int,
        quarter: Optional[int] = None,
        indicators: Optional[Mapping[str, Any]] = None,
        status: str = ReportStatus.DRAFT,
        notes: str = "",
    ) -> HealthDataReport:
        facility = facility_by_id(facility_id=facility_id)
        department = department_by_id(department_id=department_id)

        if status not in CREATE_STATUSES:
            raise ValidationError({"status": "A new report must be 'draft' or 'submitted'."})

        report = HealthDataReport(
            facility=facility,
            department=department,
            district=facility.district,
            state=facility.state,
            year=year,
            month=month,
            quarter=quarter,
            indicators=dict(indicators) if indicators is not None else empty_indicators(),
            status=status,
            notes=notes or "",
            submitted_by_id=caller.user_id,
            submitted_at=timezone.now(),
        )
        assert_record_in_scope(
            caller,
            report,
            KIND_REPORTS,
            "Not authorized to submit reports for this facility or department",
        )
        _validate_report(report)

        if _period_taken(report):
            raise ConflictError(_period_message(year, month))
        save_or_conflict(report, message=_period_message(year, month), force_insert=True)

        logger.info(
            "Report created id=%s facility=%s department=%s period=%s-%s status=%s by user_id=%s",
            report.id,
            facility.id,
            department.id,
            year,
            month,
            status,
            caller.user_id,
        )
        return report

    @staticmethod
    @transaction.atomic
    def update(*, caller: Caller, report_id: UUID, patch: Mapping[str, Any]) -> HealthDataReport:
        report = report_for_caller(
            caller=caller,
            report_id=report_id,
            message="Not authorized to update this report",
        )
        changes = strip_unauthorized_status(caller, report.status, patch)

        period_before = (report.year, report.month)
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(report, field, changes[field])

        now = timezone.now()
        new_status = changes.get("status")
        if new_status and new_status != report.status:
            assert_transition_allowed(caller, report.status, new_status)
            by_field, at_field = STATUS_AUDIT_FIELDS[new_status]
            setattr(report, by_field, caller.user_id)
            setattr(report, at_field, now)
            logger.info(
                "Report %s status %s -> %s by user_id=%s (%s)",
                report.id,
                report.status,
                new_status,
                caller.user_id,
                caller.role,
            )
            report.status = new_status

        report.last_updated_by_id = caller.user_id
        report.last_updated_at = now
        _validate_report(report)

        if (report.year, report.month) != period_before and _period_taken(report):
            raise ConflictError(_period_message(report.year, report.month))
        save_or_conflict(report, message=_period_message(report.year, report.month))
        return report

    @staticmethod
    @transaction.atomic
    def delete(*, caller: Caller, report_id: UUID) -> None:
        if not caller.is_super_admin:
            raise PermissionDenied("Only super-admin can delete reports.")
        report = report_for_caller(caller=caller, report_id=report_id)
        report.delete()
        logger.info("Report deleted id=%s by user_id=%s", report_id, caller.user_id)
