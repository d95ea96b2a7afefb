# backend/hd_core/common/filters.py
from __future__ import annotations

from typing import Any, Mapping

from rest_framework.exceptions import ValidationError


def apply_filterset(filterset_class, queryset, params: Mapping[str, Any] | None):
    """
    Run a django-filter FilterSet outside a GenericAPIView.
    Bad values (year=abc, facility=not-a-uuid) become a 400, not an empty list.
    """
    fs = filterset_class(data=params or {}, queryset=queryset)
    if not fs.is_valid():
        raise ValidationError(fs.errors)
    return fs.qs
