# backend/hd_core/iam/api/views.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from hd_core.common.api.pagination import paginate
from hd_core.common.api.params import parse_uuid
from hd_core.common.api.responses import created, ok
from hd_core.common.permissions import UserPermission
from hd_core.common.scope import KIND_USERS, assert_record_in_scope, get_caller
from hd_core.iam.api.serializers import UserCreateSerializer, UserSerializer, UserUpdateSerializer
from hd_core.iam.selectors import list_users, user_by_id
from hd_core.iam.services import UserService


class UserViewSet(viewsets.ViewSet):
    permission_classes = [UserPermission]

    @extend_schema(
        tags=["Users"],
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
            OpenApiParameter("role", str, required=False),
            OpenApiParameter("facility", str, required=False),
            OpenApiParameter("district", str, required=False),
            OpenApiParameter("state", str, required=False),
        ],
        responses={200: UserSerializer(many=True)},
    )
    def list(self, request):
        qs = list_users(caller=get_caller(request.user), params=request.query_params)
        return paginate(request, qs, UserSerializer)

    @extend_schema(tags=["Users"], responses={200: UserSerializer})
    def retrieve(self, request, pk=None):
        caller = get_caller(request.user)
        profile = user_by_id(profile_id=parse_uuid(pk, "id"))
        assert_record_in_scope(caller, profile, KIND_USERS, "Not authorized to access this user")
        return ok(UserSerializer(profile).data)

    @extend_schema(tags=["Users"], request=UserCreateSerializer, responses={201: UserSerializer})
    def create(self, request):
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        profile = UserService.create(
            caller=get_caller(request.user),
            name=d["name"],
            email=d["email"],
            password=d["password"],
            role=d["role"],
            facility_id=d.get("facility"),
            department_id=d.get("department"),
            district=d.get("district", ""),
            state=d.get("state", ""),
        )
        return created(UserSerializer(profile).data)

    @extend_schema(tags=["Users"], request=UserUpdateSerializer, responses={200: UserSerializer})
    def update(self, request, pk=None):
        s = UserUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        profile = UserService.update(
            caller=get_caller(request.user),
            profile_id=parse_uuid(pk, "id"),
            patch=s.to_service_patch(),
        )
        return ok(UserSerializer(profile).data)

    partial_update = update

    @extend_schema(tags=["Users"], responses={200: None})
    def destroy(self, request, pk=None):
        UserService.delete(caller=get_caller(request.user), profile_id=parse_uuid(pk, "id"))
        return ok({})
