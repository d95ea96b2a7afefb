# backend/hd_core/common/api/params.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import ValidationError


def parse_uuid(value, field_name: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError({field_name: "Invalid UUID"})


def uuid_or_none(value, field_name: str) -> UUID | None:
    if not value:
        return None
    return parse_uuid(value, field_name)
