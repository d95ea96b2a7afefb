# backend/hd_core/iam/tests/test_commands.py
from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError

from hd_core.conftest import make_user
from hd_core.iam.models import UserProfile

pytestmark = pytest.mark.django_db


def test_create_super_admin():
    call_command("create_super_admin", email="Root@Example.org", password="secret123", stdout=StringIO())

    user = get_user_model().objects.get(username="root@example.org")
    assert user.check_password("secret123")
    assert user.hd_profile.role == "super-admin"


def test_promotes_existing_user_without_touching_password(facility):
    user = make_user("hospital-admin", facility=facility, email="boss@example.org")
    call_command("create_super_admin", email="boss@example.org", password="ignored123", stdout=StringIO())

    user.refresh_from_db()
    profile = UserProfile.objects.get(user=user)
    assert user.check_password("secret123")
    assert profile.role == "super-admin"
    assert profile.facility_id is None


def test_rejects_short_password():
    with pytest.raises(CommandError):
        call_command("create_super_admin", email="x@example.org", password="123", stdout=StringIO())
