# backend/hd_core/facilities/admin.py
from __future__ import annotations

from django.contrib import admin

from hd_core.facilities.models import Department, Facility


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    list_display = ("name", "facility_type", "district", "state", "city", "updated_at")
    list_filter = ("facility_type", "state", "district")
    search_fields = ("name", "city", "district", "state", "pincode")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("state", "district", "name")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "facility", "head_name", "updated_at")
    search_fields = ("name", "facility__name", "head_name")
    readonly_fields = ("id", "created_at", "updated_at")
