# backend/hd_core/facilities/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hd_core.facilities.models import Department, Facility, FacilityType


class FacilitySerializer(serializers.ModelSerializer):
    departments = serializers.SerializerMethodField()

    class Meta:
        model = Facility
        fields = [
            "id",
            "name",
            "facility_type",
            "address",
            "city",
            "district",
            "state",
            "pincode",
            "contact_phone",
            "contact_email",
            "departments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_departments(self, obj) -> list[str]:
        return [str(pk) for pk in obj.department_ids()]


class FacilityRefSerializer(serializers.ModelSerializer):
    """Populated reference (name/type/geography) embedded in other resources."""

    class Meta:
        model = Facility
        fields = ["id", "name", "facility_type", "district", "state"]
        read_only_fields = fields


class FacilityCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    facility_type = serializers.ChoiceField(choices=FacilityType.choices)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=128)
    district = serializers.CharField(max_length=128)
    state = serializers.CharField(max_length=128)
    pincode = serializers.RegexField(r"^[0-9]{6}$", error_messages={"invalid": "Please add a valid pincode"})
    contact_phone = serializers.CharField(max_length=32)
    contact_email = serializers.EmailField()


class FacilityUpdateSerializer(FacilityCreateSerializer):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("partial", True)
        super().__init__(*args, **kwargs)


class DepartmentSerializer(serializers.ModelSerializer):
    facility = FacilityRefSerializer(read_only=True)

    class Meta:
        model = Department
        fields = [
            "id",
            "name",
            "facility",
            "head_name",
            "head_designation",
            "head_contact_number",
            "head_email",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DepartmentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    facility = serializers.UUIDField()
    head_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    head_designation = serializers.CharField(max_length=255, required=False, allow_blank=True)
    head_contact_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    head_email = serializers.EmailField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, value: str) -> str:
        return value.strip()


class DepartmentUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    head_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    head_designation = serializers.CharField(max_length=255, required=False, allow_blank=True)
    head_contact_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    head_email = serializers.EmailField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, value: str) -> str:
        return value.strip()
