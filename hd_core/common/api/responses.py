from __future__ import annotations

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response


def ok(data: Any, *, status: int = http_status.HTTP_200_OK, **extra: Any) -> Response:
    """
    Success envelope: {success: true, data, ...extra}.
    """
    body = {"success": True}
    body.update(extra)
    body["data"] = data
    return Response(body, status=status)


def created(data: Any) -> Response:
    return ok(data, status=http_status.HTTP_201_CREATED)
