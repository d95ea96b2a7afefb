# backend/hd_core/iam/api/auth.py

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from hd_core.common.api.responses import created, ok
from hd_core.iam.api.schema_serializers import (
    DetailResponseSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
)
from hd_core.iam.api.serializers import RegisterSerializer, UserSerializer
from hd_core.iam.services import UserService

logger = logging.getLogger(__name__)


def _seconds(value: Any) -> int:
    """
    Convert a JWT lifetime setting into seconds.
    Supports timedelta OR int/float (already seconds).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        # 0 means "session cookie"
        return 0


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}

    access_name = jwt_cfg.get("AUTH_COOKIE", "hd_access")
    refresh_name = jwt_cfg.get("AUTH_COOKIE_REFRESH", "hd_refresh")

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    for name, value, lifetime in (
        (access_name, access, jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=30))),
        (refresh_name, refresh, jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_seconds(lifetime),
            httponly=True,
            secure=secure,
            samesite=samesite,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE", "hd_access"), path="/")
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE_REFRESH", "hd_refresh"), path="/")


def _profile_data(user):
    profile = getattr(user, "hd_profile", None)
    return UserSerializer(profile).data if profile is not None else None


class LoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: LoginResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        req = LoginRequestSerializer(data=request.data)
        req.is_valid(raise_exception=True)
        email = req.validated_data["email"].strip().lower()

        # auth users are keyed by email (username == email)
        serializer = TokenObtainPairSerializer(
            data={"username": email, "password": req.validated_data["password"]}
        )
        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed:
            logger.info("Failed login for %s", email)
            raise AuthenticationFailed("Invalid credentials")

        access = serializer.validated_data["access"]
        refresh = serializer.validated_data["refresh"]

        res = ok({"access": access, "refresh": refresh, "user": _profile_data(serializer.user)})
        _set_auth_cookies(res, access=access, refresh=refresh)
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
        refresh_cookie_name = jwt_cfg.get("AUTH_COOKIE_REFRESH", "hd_refresh")
        refresh = request.data.get("refresh") or request.COOKIES.get(refresh_cookie_name)
        if not refresh:
            raise AuthenticationFailed("Refresh token missing")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = ok({"access": access, "refresh": new_refresh})
        _set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        res = ok({})
        _clear_auth_cookies(res)
        return res


class RegisterView(APIView):
    """
    Self-service sign-up. Always produces a department-user.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=RegisterSerializer, responses={201: LoginResponseSerializer}, tags=["Auth"])
    def post(self, request):
        s = RegisterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        profile = UserService.register(
            name=d["name"],
            email=d["email"],
            password=d["password"],
            facility_id=d["facility"],
            department_id=d["department"],
        )

        refresh = RefreshToken.for_user(profile.user)
        access = str(refresh.access_token)
        res = created({"access": access, "refresh": str(refresh), "user": UserSerializer(profile).data})
        _set_auth_cookies(res, access=access, refresh=str(refresh))
        return res
