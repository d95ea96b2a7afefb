# backend/hd_core/iam/models.py
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from hd_core.common.models import UUIDModel
from hd_core.common.scope import (
    ROLE_DEPARTMENT_USER,
    ROLE_DISTRICT_ADMIN,
    ROLE_HOSPITAL_ADMIN,
    ROLE_STATE_ADMIN,
    ROLE_SUPER_ADMIN,
)
from hd_core.facilities.models import Department, Facility


class UserRole(models.TextChoices):
    SUPER_ADMIN = ROLE_SUPER_ADMIN, "Super admin"
    STATE_ADMIN = ROLE_STATE_ADMIN, "State admin"
    DISTRICT_ADMIN = ROLE_DISTRICT_ADMIN, "District admin"
    HOSPITAL_ADMIN = ROLE_HOSPITAL_ADMIN, "Hospital admin"
    DEPARTMENT_USER = ROLE_DEPARTMENT_USER, "Department user"


# attribute -> roles that must carry it
REQUIRED_SCOPE_ATTRIBUTES = {
    "facility": {ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER},
    "department": {ROLE_DEPARTMENT_USER},
    "district": {ROLE_DISTRICT_ADMIN, ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER},
    "state": {ROLE_STATE_ADMIN, ROLE_DISTRICT_ADMIN, ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER},
}


class UserProfile(UUIDModel):
    """
    Reporting-system identity anchored to Django's AUTH_USER_MODEL
    (username = email, password hash lives on the auth user).
    Role + hierarchy attributes drive every scope decision.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="hd_profile")
    name = models.CharField(max_length=255)

    role = models.CharField(
        max_length=32,
        choices=UserRole.choices,
        default=UserRole.DEPARTMENT_USER,
        db_index=True,
    )

    facility = models.ForeignKey(
        Facility,
        on_delete=models.PROTECT,
        related_name="user_profiles",
        null=True,
        blank=True,
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="user_profiles",
        null=True,
        blank=True,
    )
    district = models.CharField(max_length=128, blank=True, default="", db_index=True)
    state = models.CharField(max_length=128, blank=True, default="", db_index=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role", "state", "district"], name="iam_profile_role_geo_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> ({self.role})"

    @property
    def email(self) -> str:
        return self.user.email

    def clean(self):
        errors = {}
        for attr, roles in REQUIRED_SCOPE_ATTRIBUTES.items():
            if self.role not in roles:
                continue
            value = getattr(self, f"{attr}_id") if attr in {"facility", "department"} else getattr(self, attr)
            if not value:
                errors[attr] = f"{attr} is required for role {self.role}."

        if self.department_id and self.facility_id and self.department.facility_id != self.facility_id:
            errors["department"] = "Department does not belong to the user's facility."

        if errors:
            raise ValidationError(errors)
