# backend/hd_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from hd_core.common.api.responses import ok
from hd_core.common.scope import get_caller
from hd_core.iam.api.schema_serializers import MeResponseSerializer
from hd_core.iam.api.serializers import UserSerializer


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["Auth"])
    def get(self, request):
        profile = getattr(request.user, "hd_profile", None)
        if profile is not None:
            return ok(UserSerializer(profile).data)

        # bootstrap superuser without a profile
        caller = get_caller(request.user)
        return ok(
            {
                "id": None,
                "name": request.user.get_username(),
                "email": request.user.email,
                "role": caller.role,
                "facility": None,
                "department_id": None,
                "district": "",
                "state": "",
            }
        )
