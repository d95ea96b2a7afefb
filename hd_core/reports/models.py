# backend/hd_core/reports/models.py
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from hd_core.common.models import UUIDModel
from hd_core.facilities.models import Department, Facility
from hd_core.reports.indicators import empty_indicators


class ReportStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    REVIEWED = "reviewed", "Reviewed"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class HealthDataReport(UUIDModel):
    """
    One department's monthly indicator return.
    district/state are copied from the facility at creation so scope filters
    and aggregation never need a join.
    """

    facility = models.ForeignKey(Facility, on_delete=models.PROTECT, related_name="health_reports")
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="health_reports")
    district = models.CharField(max_length=128, db_index=True)
    state = models.CharField(max_length=128, db_index=True)

    # Reporting period
    year = models.PositiveIntegerField(validators=[MinValueValidator(1900), MaxValueValidator(9999)])
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    quarter = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(4)],
    )

    indicators = models.JSONField(default=empty_indicators)

    status = models.CharField(
        max_length=16,
        choices=ReportStatus.choices,
        default=ReportStatus.DRAFT,
        db_index=True,
    )
    notes = models.TextField(blank=True, default="")

    # Audit
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="submitted_health_reports",
    )
    submitted_at = models.DateTimeField(default=timezone.now, db_index=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="reviewed_health_reports",
        null=True,
        blank=True,
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="approved_health_reports",
        null=True,
        blank=True,
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="rejected_health_reports",
        null=True,
        blank=True,
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    last_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="last_updated_health_reports",
        null=True,
        blank=True,
    )
    last_updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "reports_health_data_report"
        constraints = [
            models.UniqueConstraint(
                fields=["facility", "department", "year", "month"],
                name="uq_report_facility_department_period",
            ),
        ]
        indexes = [
            models.Index(fields=["state", "district", "year", "month"], name="report_geo_period_idx"),
            models.Index(fields=["status", "year", "month"], name="report_status_period_idx"),
        ]

    def __str__(self) -> str:
        return f"Report({self.facility_id}/{self.department_id} {self.year}-{self.month:02d}, {self.status})"

    def clean(self):
        if self.department_id and self.facility_id and self.department.facility_id != self.facility_id:
            raise ValidationError({"department": "Department does not belong to the facility."})
