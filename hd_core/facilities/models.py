# backend/hd_core/facilities/models.py
from __future__ import annotations

from django.core.validators import RegexValidator
from django.db import models

from hd_core.common.models import UUIDModel


class FacilityType(models.TextChoices):
    HOSPITAL = "Hospital", "Hospital"
    PHC = "Primary Health Center", "Primary Health Center"
    CHC = "Community Health Center", "Community Health Center"
    SUB_DISTRICT = "Sub-district Hospital", "Sub-district Hospital"
    DISTRICT = "District Hospital", "District Hospital"
    MEDICAL_COLLEGE = "Medical College", "Medical College"
    DEPARTMENT = "Department", "Department"


pincode_validator = RegexValidator(r"^[0-9]{6}$", "Please add a valid pincode")


class Facility(UUIDModel):
    """
    A reporting facility. Its district/state are the geography every report inherits.
    """

    name = models.CharField(max_length=255, unique=True)
    facility_type = models.CharField(max_length=32, choices=FacilityType.choices, db_index=True)

    # Address
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=128)
    district = models.CharField(max_length=128, db_index=True)
    state = models.CharField(max_length=128, db_index=True)
    pincode = models.CharField(max_length=6, validators=[pincode_validator])

    # Contact
    contact_phone = models.CharField(max_length=32)
    contact_email = models.EmailField()

    class Meta:
        db_table = "facilities_facility"
        indexes = [
            models.Index(fields=["state", "district"], name="facility_state_district_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def department_ids(self) -> list:
        """Owned departments in the order they were linked."""
        return list(self.department_links.order_by("id").values_list("department_id", flat=True))


class Department(UUIDModel):
    name = models.CharField(max_length=255)
    facility = models.ForeignKey(Facility, on_delete=models.PROTECT, related_name="owned_departments")

    # Head of department (optional)
    head_name = models.CharField(max_length=255, blank=True, default="")
    head_designation = models.CharField(max_length=255, blank=True, default="")
    head_contact_number = models.CharField(max_length=32, blank=True, default="")
    head_email = models.EmailField(blank=True, default="")

    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "facilities_department"
        constraints = [
            models.UniqueConstraint(fields=["name", "facility"], name="uq_department_name_facility"),
        ]

    def __str__(self) -> str:
        return f"{self.name} @ {self.facility_id}"


class FacilityDepartmentLink(models.Model):
    """
    Ordered list of a facility's departments.
    Written alongside Department create/delete (see DepartmentService).
    """
    facility = models.ForeignKey(Facility, on_delete=models.CASCADE, related_name="department_links")
    department = models.OneToOneField(Department, on_delete=models.CASCADE, related_name="facility_link")
    linked_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "facilities_facility_department"
        ordering = ["id"]
