# backend/hd_core/common/permissions.py

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission, SAFE_METHODS

from hd_core.common.scope import (
    ALL_ROLES,
    ROLE_DEPARTMENT_USER,
    ROLE_DISTRICT_ADMIN,
    ROLE_HOSPITAL_ADMIN,
    ROLE_STATE_ADMIN,
    ROLE_SUPER_ADMIN,
    get_caller,
)

EVERYONE = set(ALL_ROLES)
ADMINS = {ROLE_SUPER_ADMIN, ROLE_STATE_ADMIN, ROLE_DISTRICT_ADMIN, ROLE_HOSPITAL_ADMIN}
REGIONAL_ADMINS = {ROLE_SUPER_ADMIN, ROLE_STATE_ADMIN, ROLE_DISTRICT_ADMIN}


def caller_role(user) -> str | None:
    """
    Role of the authenticated user, or None when it cannot be resolved
    (anonymous, or no profile and not a superuser).
    """
    try:
        return get_caller(user).role
    except PermissionDenied:
        return None


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    Key behavior:
    - Requires authentication.
    - super-admin bypass.
    - Uses allowed_roles_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve
      instead of denying (@action endpoints whose name is not in the map).

    Row-level scope is NOT decided here; see hd_core.common.scope.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": EVERYONE,
        "retrieve": EVERYONE,
        "create": {ROLE_SUPER_ADMIN},
        "update": {ROLE_SUPER_ADMIN},
        "partial_update": {ROLE_SUPER_ADMIN},
        "destroy": {ROLE_SUPER_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        # fallback inference when action isn't set
        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        role = caller_role(user)
        if role is None:
            return False

        if role == ROLE_SUPER_ADMIN:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            read_action = "retrieve" if is_detail else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return role in allowed

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class FacilityPermission(BaseRolePermission):
    """
    Facilities: everyone reads; regional admins write; only super-admin deletes.
    """
    allowed_roles_per_action = {
        "list": EVERYONE,
        "retrieve": EVERYONE,
        "create": REGIONAL_ADMINS,
        "update": REGIONAL_ADMINS,
        "partial_update": REGIONAL_ADMINS,
        "destroy": {ROLE_SUPER_ADMIN},
    }


class DepartmentPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": EVERYONE,
        "retrieve": EVERYONE,
        "create": ADMINS,
        "update": ADMINS,
        "partial_update": ADMINS,
        "destroy": ADMINS,
    }


class UserPermission(BaseRolePermission):
    """Department users cannot see or manage other users."""
    allowed_roles_per_action = {
        "list": ADMINS,
        "retrieve": ADMINS,
        "create": ADMINS,
        "update": ADMINS,
        "partial_update": ADMINS,
        "destroy": ADMINS,
    }


class HealthReportPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": EVERYONE,
        "retrieve": EVERYONE,
        "create": {ROLE_SUPER_ADMIN, ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER},
        "update": EVERYONE,
        "partial_update": EVERYONE,
        "destroy": {ROLE_SUPER_ADMIN},
        "aggregate": EVERYONE,
    }
