# backend/hd_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope.
    `success` + top-level `message` keep the {success, data, message} response convention;
    `error` carries the machine-readable kind.
    """
    rid = ensure_request_id(request)
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        },
    }


class ConflictError(APIException):
    """
    Uniqueness violation (duplicate email, report period, department name).
    Reported as 400 like any other bad input, but with its own code.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Duplicate record."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class AggregationFailed(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to compute aggregated report."
    default_code = "aggregation_failed"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _translate(exc: Exception) -> Exception:
    """
    Persistence-layer errors that must surface as 400-class responses, not 500s.
    """
    if isinstance(exc, IntegrityError):
        return ConflictError()
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            return ValidationError(exc.message_dict)
        return ValidationError({"detail": " ".join(exc.messages)})
    return exc


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    exc = _translate(exc)
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled error request_id=%s", ensure_request_id(request), exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # DRF standardizes errors into response.data
    data = response.data

    # Message + details rules:
    # 1) If {"detail": "..."} only -> message=detail, details=None
    # 2) If {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) Otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        detail = data.get("detail")
        # ValidationError({"detail": "..."}) arrives wrapped in a list
        if isinstance(detail, list) and detail:
            detail = detail[0]
        message = str(detail)
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and data:
        message = str(data[0])

    if http_status >= 500:
        logger.error("Request failed request_id=%s code=%s: %s", ensure_request_id(request), code, message)

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
