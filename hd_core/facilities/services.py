# backend/hd_core/facilities/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from hd_core.common.db import save_or_conflict
from hd_core.common.scope import Caller, can_manage_department
from hd_core.facilities.models import Department, Facility, FacilityDepartmentLink
from hd_core.facilities.selectors import department_by_id, facility_by_id

logger = logging.getLogger(__name__)

FACILITY_FIELDS = (
    "name",
    "facility_type",
    "address",
    "city",
    "district",
    "state",
    "pincode",
    "contact_phone",
    "contact_email",
)

DEPARTMENT_FIELDS = (
    "name",
    "head_name",
    "head_designation",
    "head_contact_number",
    "head_email",
    "description",
)


class FacilityService:
    @staticmethod
    @transaction.atomic
    def create(*, data: Mapping[str, Any]) -> Facility:
        f = Facility(**{k: data[k] for k in FACILITY_FIELDS if k in data})
        f.full_clean(validate_unique=False)
        save_or_conflict(f, message=f"Facility '{f.name}' already exists.", force_insert=True)
        logger.info("Facility created id=%s name=%s", f.id, f.name)
        return f

    @staticmethod
    @transaction.atomic
    def update(*, facility_id: UUID, patch: Mapping[str, Any]) -> Facility:
        f = facility_by_id(facility_id=facility_id)
        for field in FACILITY_FIELDS:
            if field in patch:
                setattr(f, field, patch[field])
        f.full_clean(validate_unique=False)
        save_or_conflict(f, message=f"Facility '{f.name}' already exists.")
        return f

    @staticmethod
    @transaction.atomic
    def delete(*, facility_id: UUID) -> None:
        f = facility_by_id(facility_id=facility_id)

        # refuse instead of leaving departments/users/reports pointing at nothing
        blockers = {
            "departments": f.owned_departments.exists(),
            "users": f.user_profiles.exists(),
            "reports": f.health_reports.exists(),
        }
        in_use = [name for name, used in blockers.items() if used]
        if in_use:
            raise ValidationError({"detail": f"Facility still has {', '.join(in_use)}; remove them first."})

        f.delete()
        logger.info("Facility deleted id=%s", facility_id)


class DepartmentService:
    """
    Department writes. The facility's ordered department list (FacilityDepartmentLink)
    is written in the same transaction as the department row.
    """

    @staticmethod
    def link(*, facility: Facility, department: Department) -> FacilityDepartmentLink:
        return FacilityDepartmentLink.objects.create(facility=facility, department=department)

    @staticmethod
    def unlink(*, department: Department) -> int:
        deleted, _ = FacilityDepartmentLink.objects.filter(department=department).delete()
        return deleted

    @staticmethod
    @transaction.atomic
    def create(*, caller: Caller, facility_id: UUID, data: Mapping[str, Any]) -> Department:
        facility = facility_by_id(facility_id=facility_id)

        d = Department(facility=facility, **{k: data[k] for k in DEPARTMENT_FIELDS if k in data})
        if not can_manage_department(caller, d):
            raise PermissionDenied("Not authorized to add departments to this facility.")

        d.full_clean(validate_unique=False, validate_constraints=False)
        save_or_conflict(
            d,
            message=f"Department '{d.name}' already exists in this facility.",
            force_insert=True,
        )
        DepartmentService.link(facility=facility, department=d)

        logger.info("Department created id=%s facility=%s", d.id, facility.id)
        return d

    @staticmethod
    @transaction.atomic
    def update(*, caller: Caller, department_id: UUID, patch: Mapping[str, Any]) -> Department:
        d = department_by_id(department_id=department_id)
        if not can_manage_department(caller, d):
            raise PermissionDenied("Not authorized to update this department")

        for field in DEPARTMENT_FIELDS:
            if field in patch:
                setattr(d, field, patch[field])

        d.full_clean(validate_unique=False, validate_constraints=False)
        save_or_conflict(d, message=f"Department '{d.name}' already exists in this facility.")
        return d

    @staticmethod
    @transaction.atomic
    def delete(*, caller: Caller, department_id: UUID) -> None:
        d = department_by_id(department_id=department_id)
        if not can_manage_department(caller, d):
            raise PermissionDenied("Not authorized to delete this department")

        if d.health_reports.exists() or d.user_profiles.exists():
            raise ValidationError({"detail": "Department has reports or users; it cannot be deleted."})

        DepartmentService.unlink(department=d)
        d.delete()
        logger.info("Department deleted id=%s facility=%s", department_id, d.facility_id)
