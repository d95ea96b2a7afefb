# backend/hd_core/facilities/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hd_core.common.scope import ATTR_FACILITY, REGIONAL_ADMIN_ROLES, Caller
from hd_core.facilities.models import Department, Facility


def facilities_all(*, district: str | None = None, state: str | None = None) -> QuerySet[Facility]:
    qs = Facility.objects.all()
    if district:
        qs = qs.filter(district=district)
    if state:
        qs = qs.filter(state=state)
    return qs.order_by("name")


def facility_by_id(*, facility_id: UUID) -> Facility:
    try:
        return Facility.objects.get(id=facility_id)
    except (Facility.DoesNotExist, ValueError):
        raise NotFound(f"Facility not found with id of {facility_id}")


def department_by_id(*, department_id: UUID) -> Department:
    try:
        return Department.objects.select_related("facility").get(id=department_id)
    except (Department.DoesNotExist, ValueError):
        raise NotFound(f"Department not found with id of {department_id}")


def departments_for_caller(*, caller: Caller, facility_id: UUID | None = None) -> QuerySet[Department]:
    """
    Facility-level roles only see their own facility's departments;
    an explicit ?facility= narrows further but never widens.
    """
    qs = Department.objects.select_related("facility")
    if caller.role not in REGIONAL_ADMIN_ROLES:
        qs = qs.filter(facility_id=getattr(caller, ATTR_FACILITY))
    if facility_id:
        qs = qs.filter(facility_id=facility_id)
    return qs.order_by("facility__name", "name")
