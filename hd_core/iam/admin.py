# backend/hd_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from hd_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "role", "facility", "district", "state", "created_at")
    list_filter = ("role", "state", "district")
    search_fields = ("name", "user__username", "user__email", "facility__name")
    readonly_fields = ("id", "created_at", "updated_at")
    raw_id_fields = ("user", "facility", "department")
