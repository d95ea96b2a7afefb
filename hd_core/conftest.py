# backend/hd_core/conftest.py
import itertools

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from hd_core.common.scope import Caller, get_caller
from hd_core.facilities.models import Department, Facility, FacilityDepartmentLink
from hd_core.iam.models import UserProfile
from hd_core.reports.indicators import empty_indicators
from hd_core.reports.models import HealthDataReport

_seq = itertools.count(1)


def make_facility(name, *, district="Pune", state="Maharashtra", **extra):
    data = {
        "name": name,
        "facility_type": "District Hospital",
        "address": "1 Hospital Road",
        "city": district,
        "district": district,
        "state": state,
        "pincode": "411001",
        "contact_phone": "020-5550000",
        "contact_email": f"contact{next(_seq)}@example.org",
    }
    data.update(extra)
    return Facility.objects.create(**data)


def make_department(facility, name="General Medicine"):
    d = Department.objects.create(facility=facility, name=name)
    FacilityDepartmentLink.objects.create(facility=facility, department=d)
    return d


def make_user(role, *, facility=None, department=None, district="", state="", password="secret123", email=None):
    """
    auth user (username == email) + profile. Geography defaults to the facility's.
    """
    email = email or f"{role}-{next(_seq)}@example.org"
    user = get_user_model().objects.create_user(username=email, email=email, password=password)
    UserProfile.objects.create(
        user=user,
        name=f"{role} user",
        role=role,
        facility=facility,
        department=department,
        district=district or (facility.district if facility else ""),
        state=state or (facility.state if facility else ""),
    )
    user.refresh_from_db()
    return user


def make_report(facility, department, *, user, year=2024, month=1, status="approved", indicators=None, **extra):
    return HealthDataReport.objects.create(
        facility=facility,
        department=department,
        district=facility.district,
        state=facility.state,
        year=year,
        month=month,
        status=status,
        indicators=indicators or empty_indicators(),
        submitted_by=user,
        **extra,
    )


def indicators_with(**categories):
    """indicators_with(resources={"totalBeds": 10}) -> full zero-filled structure with overrides."""
    data = empty_indicators()
    for category, values in categories.items():
        data[category].update(values)
    return data


def caller_of(user) -> Caller:
    return get_caller(user)


# ---------------------------------------------------------------------
# Geography: two facilities in Pune, one in Nagpur (same state), one in another state
# ---------------------------------------------------------------------
@pytest.fixture
def facility(db):
    return make_facility("Pune District Hospital")


@pytest.fixture
def facility_b(db):
    return make_facility("Pune Community Health Center", facility_type="Community Health Center")


@pytest.fixture
def facility_far(db):
    return make_facility("Nagpur Medical College", district="Nagpur", facility_type="Medical College")


@pytest.fixture
def facility_other_state(db):
    return make_facility("Indore District Hospital", district="Indore", state="Madhya Pradesh")


@pytest.fixture
def department(facility):
    return make_department(facility, "Obstetrics")


@pytest.fixture
def department_2(facility):
    return make_department(facility, "Paediatrics")


@pytest.fixture
def department_b(facility_b):
    return make_department(facility_b, "Obstetrics")


@pytest.fixture
def department_far(facility_far):
    return make_department(facility_far, "Obstetrics")


@pytest.fixture
def department_other_state(facility_other_state):
    return make_department(facility_other_state, "Obstetrics")


# ---------------------------------------------------------------------
# Users per role
# ---------------------------------------------------------------------
@pytest.fixture
def super_admin(db):
    return make_user("super-admin", email="super@example.org")


@pytest.fixture
def state_admin(db):
    return make_user("state-admin", state="Maharashtra")


@pytest.fixture
def district_admin(db):
    return make_user("district-admin", district="Pune", state="Maharashtra")


@pytest.fixture
def hospital_admin(facility):
    return make_user("hospital-admin", facility=facility)


@pytest.fixture
def department_user(facility, department):
    return make_user("department-user", facility=facility, department=department)


@pytest.fixture
def client_for():
    def _client(user=None):
        c = APIClient()
        if user is not None:
            c.force_authenticate(user=user)
        return c

    return _client


@pytest.fixture
def api_client(super_admin, client_for):
    return client_for(super_admin)
