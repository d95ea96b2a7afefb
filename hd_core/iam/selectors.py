# backend/hd_core/iam/selectors.py
from __future__ import annotations

from typing import Any
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hd_core.common.filters import apply_filterset
from hd_core.common.scope import KIND_USERS, Caller, apply_scope
from hd_core.iam.filters import UserProfileFilter
from hd_core.iam.models import UserProfile


def user_by_id(*, profile_id: UUID) -> UserProfile:
    try:
        return UserProfile.objects.select_related("user", "facility", "department").get(id=profile_id)
    except (UserProfile.DoesNotExist, ValueError):
        raise NotFound("User not found")


def email_taken(email: str, *, exclude_user_id: int | None = None) -> bool:
    qs = get_user_model().objects.filter(username__iexact=email)
    if exclude_user_id is not None:
        qs = qs.exclude(pk=exclude_user_id)
    return qs.exists()


def list_users(*, caller: Caller, params: Any) -> QuerySet[UserProfile]:
    """
    Scope predicate AND explicit filters:
      - role
      - facility
      - district
      - state
    Newest first.
    """
    qs = apply_scope(UserProfile.objects.select_related("user", "facility"), caller, KIND_USERS)
    return apply_filterset(UserProfileFilter, qs, params).order_by("-created_at")
