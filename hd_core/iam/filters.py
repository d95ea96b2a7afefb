# backend/hd_core/iam/filters.py
from __future__ import annotations

import django_filters

from hd_core.iam.models import UserProfile, UserRole


class UserProfileFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="role", choices=UserRole.choices)
    facility = django_filters.UUIDFilter(field_name="facility_id")
    district = django_filters.CharFilter(field_name="district")
    state = django_filters.CharFilter(field_name="state")

    class Meta:
        model = UserProfile
        fields = ["role", "facility", "district", "state"]
