# backend/hd_core/common/scope.py
"""
Row-level scope rules.

Every role maps to one RoleRule. Selectors and services never branch on the role
themselves; they ask this module for:
  - the visibility predicate of a caller over a collection (reports / users)
  - whether an existing record sits inside the caller's scope
  - which roles a caller may create, and which attributes it stamps on them
  - whether a role change or a status change is allowed
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rest_framework.exceptions import PermissionDenied

logger = logging.getLogger(__name__)

ROLE_SUPER_ADMIN = "super-admin"
ROLE_STATE_ADMIN = "state-admin"
ROLE_DISTRICT_ADMIN = "district-admin"
ROLE_HOSPITAL_ADMIN = "hospital-admin"
ROLE_DEPARTMENT_USER = "department-user"

ALL_ROLES = (
    ROLE_SUPER_ADMIN,
    ROLE_STATE_ADMIN,
    ROLE_DISTRICT_ADMIN,
    ROLE_HOSPITAL_ADMIN,
    ROLE_DEPARTMENT_USER,
)

ADMIN_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_STATE_ADMIN, ROLE_DISTRICT_ADMIN, ROLE_HOSPITAL_ADMIN})

# Roles allowed to move a non-draft report's status, and to manage any department.
REGIONAL_ADMIN_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_STATE_ADMIN, ROLE_DISTRICT_ADMIN})

KIND_REPORTS = "reports"
KIND_USERS = "users"

# Scope attribute names are shared by Caller, HealthDataReport and UserProfile.
ATTR_DEPARTMENT = "department_id"
ATTR_FACILITY = "facility_id"
ATTR_DISTRICT = "district"
ATTR_STATE = "state"


@dataclass(frozen=True)
class RoleRule:
    tier: int
    report_scope: Optional[str]
    user_scope: Optional[str]
    can_list_users: bool
    creatable_roles: frozenset
    forced_attributes: tuple[str, ...]
    can_change_roles: bool


ROLE_RULES: dict[str, RoleRule] = {
    ROLE_DEPARTMENT_USER: RoleRule(
        tier=1,
        report_scope=ATTR_DEPARTMENT,
        user_scope=None,
        can_list_users=False,
        creatable_roles=frozenset(),
        forced_attributes=(),
        can_change_roles=False,
    ),
    ROLE_HOSPITAL_ADMIN: RoleRule(
        tier=2,
        report_scope=ATTR_FACILITY,
        user_scope=ATTR_FACILITY,
        can_list_users=True,
        creatable_roles=frozenset({ROLE_DEPARTMENT_USER}),
        forced_attributes=(ATTR_FACILITY, ATTR_DISTRICT, ATTR_STATE),
        can_change_roles=False,
    ),
    ROLE_DISTRICT_ADMIN: RoleRule(
        tier=3,
        report_scope=ATTR_DISTRICT,
        user_scope=ATTR_DISTRICT,
        can_list_users=True,
        creatable_roles=frozenset({ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER}),
        forced_attributes=(ATTR_DISTRICT, ATTR_STATE),
        can_change_roles=True,
    ),
    ROLE_STATE_ADMIN: RoleRule(
        tier=4,
        report_scope=ATTR_STATE,
        user_scope=ATTR_STATE,
        can_list_users=True,
        creatable_roles=frozenset({ROLE_DISTRICT_ADMIN, ROLE_HOSPITAL_ADMIN, ROLE_DEPARTMENT_USER}),
        forced_attributes=(ATTR_STATE,),
        can_change_roles=True,
    ),
    ROLE_SUPER_ADMIN: RoleRule(
        tier=5,
        report_scope=None,
        user_scope=None,
        can_list_users=True,
        creatable_roles=frozenset(ALL_ROLES),
        forced_attributes=(),
        can_change_roles=True,
    ),
}


@dataclass(frozen=True)
class Caller:
    """
    The authenticated actor, reduced to what scope decisions need.
    """
    user_id: Optional[int]
    role: str
    facility_id: Any = None
    department_id: Any = None
    district: Optional[str] = None
    state: Optional[str] = None

    @property
    def rule(self) -> RoleRule:
        return rule_for(self.role)

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN


def rule_for(role: str) -> RoleRule:
    try:
        return ROLE_RULES[role]
    except KeyError:
        raise PermissionDenied(f"Unknown role '{role}'.")


def tier_of(role: str) -> int:
    return rule_for(role).tier


def get_caller(user) -> Caller:
    """
    Resolve the Caller from request.user.

    A Django superuser without a profile acts as super-admin (createsuperuser bootstrap).
    Anyone else without a profile has no scope at all.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required.")

    profile = getattr(user, "hd_profile", None)
    if profile is None:
        if getattr(user, "is_superuser", False):
            return Caller(user_id=user.pk, role=ROLE_SUPER_ADMIN)
        raise PermissionDenied("User has no role profile.")

    return Caller(
        user_id=user.pk,
        role=profile.role,
        facility_id=profile.facility_id,
        department_id=profile.department_id,
        district=profile.district or None,
        state=profile.state or None,
    )


def _scope_attr(caller: Caller, kind: str) -> Optional[str]:
    rule = caller.rule
    if kind == KIND_REPORTS:
        return rule.report_scope
    if kind == KIND_USERS:
        if not rule.can_list_users:
            raise PermissionDenied("You do not have access to user records.")
        return rule.user_scope
    raise ValueError(f"Unknown scope kind: {kind}")


def _same(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return str(a) == str(b)


def visibility_predicate(caller: Caller, kind: str) -> dict[str, Any]:
    """
    Equality constraints to AND into any query over `kind`.
    {} means unrestricted.
    """
    attr = _scope_attr(caller, kind)
    if attr is None:
        return {}
    return {attr: getattr(caller, attr)}


def apply_scope(queryset, caller: Caller, kind: str):
    predicate = visibility_predicate(caller, kind)
    if not predicate:
        return queryset
    return queryset.filter(**predicate)


def scope_allows(caller: Caller, record: Any, kind: str) -> bool:
    """
    True iff the record's scope attribute equals the caller's, or caller is super-admin.
    """
    if caller.is_super_admin:
        return True
    try:
        attr = _scope_attr(caller, kind)
    except PermissionDenied:
        return False
    if attr is None:
        return True
    return _same(getattr(record, attr, None), getattr(caller, attr))


def assert_record_in_scope(caller: Caller, record: Any, kind: str, message: str) -> None:
    if not scope_allows(caller, record, kind):
        raise PermissionDenied(message)


def can_manage_department(caller: Caller, department: Any) -> bool:
    """
    Regional admins manage any department; facility-level roles only their own facility's.
    """
    if caller.role in REGIONAL_ADMIN_ROLES:
        return True
    return _same(getattr(department, ATTR_FACILITY, None), caller.facility_id)


def strip_unauthorized_status(caller: Caller, current_status: str, changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Once a report left draft, only regional admins may change its status.
    Other callers' `status` key is dropped silently; the rest of the edit still applies.
    """
    cleaned = dict(changes)
    if "status" not in cleaned:
        return cleaned
    if current_status != "draft" and caller.role not in REGIONAL_ADMIN_ROLES:
        dropped = cleaned.pop("status")
        logger.info(
            "Ignoring status change to %r by %s (user_id=%s) on non-draft report",
            dropped,
            caller.role,
            caller.user_id,
        )
    return cleaned


def narrow_user_create(caller: Caller, requested_role: str, attrs: Mapping[str, Any]) -> dict[str, Any]:
    """
    Enforce the creator's allowed target roles and stamp its own hierarchy attributes.
    """
    rule = caller.rule
    if requested_role not in rule.creatable_roles:
        allowed = ", ".join(sorted(rule.creatable_roles)) or "none"
        raise PermissionDenied(f"You can only create users with roles: {allowed}.")

    narrowed = dict(attrs)
    for attr in rule.forced_attributes:
        narrowed[attr] = getattr(caller, attr)
    return narrowed


def assert_facility_in_scope(caller: Caller, facility: Any) -> None:
    """
    A user may only be bound to a facility inside the caller's own region.
    The facility must agree with every attribute the caller stamps on its users.
    """
    if caller.is_super_admin:
        return
    for attr in caller.rule.forced_attributes:
        value = facility.pk if attr == ATTR_FACILITY else getattr(facility, attr, None)
        if not _same(value, getattr(caller, attr)):
            raise PermissionDenied("Facility is outside your scope.")


def assert_role_change_allowed(caller: Caller, current_role: str, new_role: Optional[str]) -> None:
    """
    Hospital-level roles never change roles; other admins may not promote
    anyone to their own tier or above. Super-admin is unrestricted.
    """
    if not new_role or new_role == current_role:
        return
    if caller.is_super_admin:
        return
    if not caller.rule.can_change_roles:
        raise PermissionDenied("You are not allowed to change user roles.")
    if tier_of(new_role) >= caller.rule.tier:
        raise PermissionDenied("Not authorized to change user to this role.")


def assert_can_delete_user(caller: Caller, target: Any) -> None:
    """
    Below super-admin, a caller may delete only users it could have created, inside its scope.
    """
    if caller.is_super_admin:
        return
    if target.role not in caller.rule.creatable_roles or not scope_allows(caller, target, KIND_USERS):
        raise PermissionDenied("Not authorized to delete this user.")
