# backend/hd_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hd_core.facilities.api.serializers import FacilityRefSerializer
from hd_core.iam.models import UserProfile, UserRole


class UserSerializer(serializers.ModelSerializer):
    """Never exposes the password hash."""
    email = serializers.EmailField(source="user.email", read_only=True)
    facility = FacilityRefSerializer(read_only=True, allow_null=True)
    department_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "name",
            "email",
            "role",
            "facility",
            "department_id",
            "district",
            "state",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.DEPARTMENT_USER)
    facility = serializers.UUIDField(required=False, allow_null=True)
    department = serializers.UUIDField(required=False, allow_null=True)
    district = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=6, write_only=True, required=False)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    facility = serializers.UUIDField(required=False, allow_null=True)
    department = serializers.UUIDField(required=False, allow_null=True)
    district = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=128, required=False, allow_blank=True)

    def to_service_patch(self) -> dict:
        d = dict(self.validated_data)
        if "facility" in d:
            d["facility_id"] = d.pop("facility")
        if "department" in d:
            d["department_id"] = d.pop("department")
        return d


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    facility = serializers.UUIDField()
    department = serializers.UUIDField()
