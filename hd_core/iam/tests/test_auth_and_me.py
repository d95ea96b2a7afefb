# backend/hd_core/iam/tests/test_auth_and_me.py
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from hd_core.iam.models import UserProfile

pytestmark = pytest.mark.django_db


def test_me_requires_auth():
    res = APIClient().get("/api/me/")
    assert res.status_code == 401


def test_login_by_email_sets_cookies(department_user, settings):
    res = APIClient().post(
        "/api/auth/login/",
        {"email": department_user.email.upper(), "password": "secret123"},
        format="json",
    )
    assert res.status_code == 200, res.content

    body = res.json()
    assert body["success"] is True
    assert body["data"]["access"]
    assert body["data"]["user"]["role"] == "department-user"
    assert "password" not in body["data"]["user"]

    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies
    assert settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"] in res.cookies


def test_login_wrong_password(department_user):
    res = APIClient().post(
        "/api/auth/login/",
        {"email": department_user.email, "password": "nope-nope"},
        format="json",
    )
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"


def test_cookie_session_refresh_and_logout(hospital_admin, settings):
    c = APIClient()
    c.post("/api/auth/login/", {"email": hospital_admin.email, "password": "secret123"}, format="json")

    # the access cookie alone authenticates
    me = c.get("/api/me/")
    assert me.status_code == 200
    assert me.json()["data"]["role"] == "hospital-admin"

    res = c.post("/api/auth/refresh/")
    assert res.status_code == 200
    assert res.json()["data"]["access"]

    res = c.post("/api/auth/logout/")
    assert res.status_code == 200
    assert res.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]].value == ""


def test_refresh_without_token():
    res = APIClient().post("/api/auth/refresh/")
    assert res.status_code == 401


def test_me_with_bearer_token(department_user, department):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(department_user).access_token}")

    res = c.get("/api/v1/me/")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["email"] == department_user.email
    assert data["department_id"] == str(department.id)
    assert data["facility"]["district"] == "Pune"


def test_me_for_bootstrap_superuser(db, client_for):
    from django.contrib.auth import get_user_model

    root = get_user_model().objects.create_superuser(username="root@example.org", email="root@example.org", password="x")
    res = client_for(root).get("/api/me/")
    assert res.status_code == 200
    assert res.json()["data"]["role"] == "super-admin"


def test_register_creates_department_user(facility, department):
    res = APIClient().post(
        "/api/auth/register/",
        {
            "name": "Asha Patil",
            "email": "Asha@Example.org",
            "password": "secret123",
            "facility": str(facility.id),
            "department": str(department.id),
        },
        format="json",
    )
    assert res.status_code == 201, res.content

    user = res.json()["data"]["user"]
    assert user["role"] == "department-user"
    assert user["email"] == "asha@example.org"
    assert user["district"] == facility.district
    assert user["state"] == facility.state
    assert "hd_access" in res.cookies


def test_register_duplicate_email_is_conflict(department_user, facility, department):
    res = APIClient().post(
        "/api/auth/register/",
        {
            "name": "Dup",
            "email": department_user.email,
            "password": "secret123",
            "facility": str(facility.id),
            "department": str(department.id),
        },
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "conflict"
    assert UserProfile.objects.filter(user__email=department_user.email).count() == 1


def test_register_department_must_belong_to_facility(facility, department_b):
    res = APIClient().post(
        "/api/auth/register/",
        {
            "name": "Mismatch",
            "email": "mismatch@example.org",
            "password": "secret123",
            "facility": str(facility.id),
            "department": str(department_b.id),
        },
        format="json",
    )
    assert res.status_code == 400
    assert "department" in res.json()["error"]["details"]


def test_register_short_password(facility, department):
    res = APIClient().post(
        "/api/auth/register/",
        {
            "name": "Short",
            "email": "short@example.org",
            "password": "abc",
            "facility": str(facility.id),
            "department": str(department.id),
        },
        format="json",
    )
    assert res.status_code == 400
