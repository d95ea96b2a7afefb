# backend/hd_core/common/tests/test_scope.py
from types import SimpleNamespace
from uuid import uuid4

import pytest
from rest_framework.exceptions import PermissionDenied

from hd_core.common.scope import (
    KIND_REPORTS,
    KIND_USERS,
    Caller,
    assert_can_delete_user,
    assert_facility_in_scope,
    assert_role_change_allowed,
    can_manage_department,
    narrow_user_create,
    scope_allows,
    strip_unauthorized_status,
    visibility_predicate,
)

FAC = uuid4()
DEPT = uuid4()


def caller(role, **kw):
    base = {"user_id": 1, "role": role, "facility_id": FAC, "department_id": DEPT, "district": "Pune", "state": "Maharashtra"}
    base.update(kw)
    return Caller(**base)


def record(**kw):
    base = {"facility_id": FAC, "department_id": DEPT, "district": "Pune", "state": "Maharashtra", "role": "department-user"}
    base.update(kw)
    return SimpleNamespace(**base)


@pytest.mark.parametrize(
    "role, expected",
    [
        ("department-user", {"department_id": DEPT}),
        ("hospital-admin", {"facility_id": FAC}),
        ("district-admin", {"district": "Pune"}),
        ("state-admin", {"state": "Maharashtra"}),
        ("super-admin", {}),
    ],
)
def test_report_visibility_predicate_per_role(role, expected):
    assert visibility_predicate(caller(role), KIND_REPORTS) == expected


@pytest.mark.parametrize(
    "role, expected",
    [
        ("hospital-admin", {"facility_id": FAC}),
        ("district-admin", {"district": "Pune"}),
        ("state-admin", {"state": "Maharashtra"}),
        ("super-admin", {}),
    ],
)
def test_user_visibility_predicate_per_role(role, expected):
    assert visibility_predicate(caller(role), KIND_USERS) == expected


def test_department_user_has_no_user_visibility():
    with pytest.raises(PermissionDenied):
        visibility_predicate(caller("department-user"), KIND_USERS)


def test_unknown_role_is_forbidden():
    with pytest.raises(PermissionDenied):
        visibility_predicate(caller("janitor"), KIND_REPORTS)


def test_scope_allows_matches_on_role_attribute():
    other_dept = record(department_id=uuid4())
    assert scope_allows(caller("department-user"), record(), KIND_REPORTS)
    assert not scope_allows(caller("department-user"), other_dept, KIND_REPORTS)

    # hospital-admin sees any department of its own facility
    assert scope_allows(caller("hospital-admin"), other_dept, KIND_REPORTS)
    assert not scope_allows(caller("hospital-admin"), record(facility_id=uuid4()), KIND_REPORTS)

    assert not scope_allows(caller("district-admin"), record(district="Nagpur"), KIND_REPORTS)
    assert scope_allows(caller("state-admin"), record(district="Nagpur"), KIND_REPORTS)
    assert scope_allows(caller("super-admin"), record(state="Goa", district="Panaji"), KIND_REPORTS)


def test_scope_allows_compares_uuid_and_string_ids():
    assert scope_allows(caller("hospital-admin"), record(facility_id=str(FAC)), KIND_REPORTS)


def test_caller_without_attribute_sees_nothing():
    orphan = caller("district-admin", district=None)
    assert not scope_allows(orphan, record(district=None), KIND_REPORTS)


def test_can_manage_department():
    own = SimpleNamespace(facility_id=FAC)
    foreign = SimpleNamespace(facility_id=uuid4())

    for role in ("super-admin", "state-admin", "district-admin"):
        assert can_manage_department(caller(role), foreign)

    assert can_manage_department(caller("hospital-admin"), own)
    assert not can_manage_department(caller("hospital-admin"), foreign)
    assert not can_manage_department(caller("department-user"), foreign)


def test_status_dropped_for_facility_roles_once_submitted():
    changes = {"status": "approved", "notes": "fixed totals"}

    kept = strip_unauthorized_status(caller("hospital-admin"), "submitted", changes)
    assert kept == {"notes": "fixed totals"}
    assert "status" in changes  # input untouched

    # still draft: the status key survives (transition rules decide later)
    assert strip_unauthorized_status(caller("department-user"), "draft", changes) == changes


@pytest.mark.parametrize("role", ["super-admin", "state-admin", "district-admin"])
def test_status_kept_for_regional_admins(role):
    changes = {"status": "approved"}
    assert strip_unauthorized_status(caller(role), "submitted", changes) == changes


def test_hospital_admin_cannot_create_district_admin():
    with pytest.raises(PermissionDenied):
        narrow_user_create(caller("hospital-admin"), "district-admin", {})


def test_hospital_admin_stamps_its_own_hierarchy_on_new_users():
    requested = {"facility_id": uuid4(), "district": "Mumbai", "state": "Goa", "department_id": DEPT}
    narrowed = narrow_user_create(caller("hospital-admin"), "department-user", requested)

    assert narrowed["facility_id"] == FAC
    assert narrowed["district"] == "Pune"
    assert narrowed["state"] == "Maharashtra"
    assert narrowed["department_id"] == DEPT


def test_state_admin_forces_state_only():
    narrowed = narrow_user_create(caller("state-admin"), "district-admin", {"district": "Nagpur", "state": "Goa"})
    assert narrowed == {"district": "Nagpur", "state": "Maharashtra"}


def test_department_user_creates_nobody():
    with pytest.raises(PermissionDenied):
        narrow_user_create(caller("department-user"), "department-user", {})


def test_super_admin_creates_any_role_unchanged():
    attrs = {"state": "Goa"}
    assert narrow_user_create(caller("super-admin"), "state-admin", attrs) == attrs


def test_role_change_at_or_above_own_tier_forbidden():
    with pytest.raises(PermissionDenied):
        assert_role_change_allowed(caller("district-admin"), "hospital-admin", "district-admin")
    with pytest.raises(PermissionDenied):
        assert_role_change_allowed(caller("hospital-admin"), "department-user", "hospital-admin")

    assert_role_change_allowed(caller("district-admin"), "department-user", "hospital-admin")
    assert_role_change_allowed(caller("hospital-admin"), "department-user", "department-user")
    assert_role_change_allowed(caller("super-admin"), "department-user", "super-admin")


@pytest.mark.parametrize(
    "current, new",
    [("hospital-admin", "department-user"), ("department-user", "hospital-admin")],
)
def test_hospital_admin_never_changes_roles(current, new):
    with pytest.raises(PermissionDenied):
        assert_role_change_allowed(caller("hospital-admin"), current, new)


@pytest.mark.parametrize(
    "role, facility, allowed",
    [
        ("super-admin", record(pk=uuid4(), district="Indore", state="Madhya Pradesh"), True),
        ("state-admin", record(pk=uuid4(), district="Nagpur"), True),
        ("state-admin", record(pk=uuid4(), district="Indore", state="Madhya Pradesh"), False),
        ("district-admin", record(pk=uuid4()), True),
        ("district-admin", record(pk=uuid4(), district="Nagpur"), False),
        ("hospital-admin", record(pk=FAC), True),
        ("hospital-admin", record(pk=uuid4()), False),
    ],
)
def test_facility_must_sit_in_callers_region(role, facility, allowed):
    if allowed:
        assert_facility_in_scope(caller(role), facility)
    else:
        with pytest.raises(PermissionDenied):
            assert_facility_in_scope(caller(role), facility)


def test_delete_user_needs_creatable_role_inside_scope():
    assert_can_delete_user(caller("hospital-admin"), record(role="department-user"))

    with pytest.raises(PermissionDenied):
        assert_can_delete_user(caller("hospital-admin"), record(role="hospital-admin"))
    with pytest.raises(PermissionDenied):
        assert_can_delete_user(caller("hospital-admin"), record(facility_id=uuid4()))
    with pytest.raises(PermissionDenied):
        assert_can_delete_user(caller("department-user"), record())
