# backend/hd_core/facilities/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets

from hd_core.common.api.params import parse_uuid, uuid_or_none
from hd_core.common.api.responses import created, ok
from hd_core.common.permissions import DepartmentPermission, FacilityPermission
from hd_core.common.scope import get_caller
from hd_core.facilities.api.serializers import (
    DepartmentCreateSerializer,
    DepartmentSerializer,
    DepartmentUpdateSerializer,
    FacilityCreateSerializer,
    FacilitySerializer,
    FacilityUpdateSerializer,
)
from hd_core.facilities.selectors import (
    department_by_id,
    departments_for_caller,
    facilities_all,
    facility_by_id,
)
from hd_core.facilities.services import DepartmentService, FacilityService


class FacilityViewSet(viewsets.ViewSet):
    permission_classes = [FacilityPermission]

    @extend_schema(tags=["Facilities"], responses={200: FacilitySerializer(many=True)})
    def list(self, request):
        qs = facilities_all(
            district=request.query_params.get("district"),
            state=request.query_params.get("state"),
        )
        data = FacilitySerializer(qs, many=True).data
        return ok(data, count=len(data))

    @extend_schema(tags=["Facilities"], responses={200: FacilitySerializer})
    def retrieve(self, request, pk=None):
        obj = facility_by_id(facility_id=parse_uuid(pk, "id"))
        return ok(FacilitySerializer(obj).data)

    @extend_schema(tags=["Facilities"], request=FacilityCreateSerializer, responses={201: FacilitySerializer})
    def create(self, request):
        s = FacilityCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        obj = FacilityService.create(data=s.validated_data)
        return created(FacilitySerializer(obj).data)

    @extend_schema(tags=["Facilities"], request=FacilityUpdateSerializer, responses={200: FacilitySerializer})
    def update(self, request, pk=None):
        s = FacilityUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        obj = FacilityService.update(facility_id=parse_uuid(pk, "id"), patch=s.validated_data)
        return ok(FacilitySerializer(obj).data)

    partial_update = update

    @extend_schema(tags=["Facilities"], responses={200: None})
    def destroy(self, request, pk=None):
        FacilityService.delete(facility_id=parse_uuid(pk, "id"))
        return ok({})


class DepartmentViewSet(viewsets.ViewSet):
    permission_classes = [DepartmentPermission]

    @extend_schema(tags=["Departments"], responses={200: DepartmentSerializer(many=True)})
    def list(self, request):
        caller = get_caller(request.user)
        qs = departments_for_caller(
            caller=caller,
            facility_id=uuid_or_none(request.query_params.get("facility"), "facility"),
        )
        data = DepartmentSerializer(qs, many=True).data
        return ok(data, count=len(data))

    @extend_schema(tags=["Departments"], responses={200: DepartmentSerializer})
    def retrieve(self, request, pk=None):
        obj = department_by_id(department_id=parse_uuid(pk, "id"))
        return ok(DepartmentSerializer(obj).data)

    @extend_schema(tags=["Departments"], request=DepartmentCreateSerializer, responses={201: DepartmentSerializer})
    def create(self, request):
        s = DepartmentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = dict(s.validated_data)
        facility_id = d.pop("facility")

        obj = DepartmentService.create(caller=get_caller(request.user), facility_id=facility_id, data=d)
        return created(DepartmentSerializer(obj).data)

    @extend_schema(tags=["Departments"], request=DepartmentUpdateSerializer, responses={200: DepartmentSerializer})
    def update(self, request, pk=None):
        s = DepartmentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        obj = DepartmentService.update(
            caller=get_caller(request.user),
            department_id=parse_uuid(pk, "id"),
            patch=s.validated_data,
        )
        return ok(DepartmentSerializer(obj).data)

    partial_update = update

    @extend_schema(tags=["Departments"], responses={200: None})
    def destroy(self, request, pk=None):
        DepartmentService.delete(caller=get_caller(request.user), department_id=parse_uuid(pk, "id"))
        return ok({})
