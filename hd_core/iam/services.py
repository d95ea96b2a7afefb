# backend/hd_core/iam/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from rest_framework.exceptions import PermissionDenied, ValidationError

from hd_core.common.api.exceptions import ConflictError
from hd_core.common.scope import (
    KIND_USERS,
    ROLE_DEPARTMENT_USER,
    Caller,
    assert_can_delete_user,
    assert_facility_in_scope,
    assert_record_in_scope,
    assert_role_change_allowed,
    narrow_user_create,
)
from hd_core.facilities.selectors import department_by_id, facility_by_id
from hd_core.iam.models import UserProfile
from hd_core.iam.selectors import email_taken, user_by_id

logger = logging.getLogger(__name__)

SCOPE_KEYS = ("facility_id", "department_id", "district", "state")


def _check_password(password: str, user=None) -> None:
    try:
        validate_password(password, user=user)
    except DjangoValidationError as e:
        raise ValidationError({"password": e.messages})


def _resolve_geography(attrs: dict[str, Any], caller: Optional[Caller] = None) -> dict[str, Any]:
    """
    Facility/department must exist; a department must sit in the facility.
    With a caller, the facility must also sit inside the caller's scope.
    District/state default to the facility's when not given.
    """
    facility = None
    if attrs.get("facility_id"):
        facility = facility_by_id(facility_id=attrs["facility_id"])
        if caller is not None:
            assert_facility_in_scope(caller, facility)
        attrs["district"] = attrs.get("district") or facility.district
        attrs["state"] = attrs.get("state") or facility.state

    if attrs.get("department_id"):
        department = department_by_id(department_id=attrs["department_id"])
        if facility is None:
            raise ValidationError({"facility": "facility is required when department is set."})
        if department.facility_id != facility.id:
            raise ValidationError({"department": "Department does not belong to the given facility."})

    return attrs


def _validate_profile(profile: UserProfile) -> None:
    try:
        profile.full_clean(exclude=["user"])
    except DjangoValidationError as e:
        raise ValidationError(e.message_dict)


class UserService:
    """
    User write-model operations. Every decision about who may create/change/delete whom
    is delegated to hd_core.common.scope.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        caller: Caller,
        name: str,
        email: str,
        password: str,
        role: str = ROLE_DEPARTMENT_USER,
        facility_id: Optional[UUID] = None,
        department_id: Optional[UUID] = None,
        district: str = "",
        state: str = "",
    ) -> UserProfile:
        email = email.strip().lower()
        if email_taken(email):
            raise ConflictError("Email already in use")

        attrs = narrow_user_create(
            caller,
            role,
            {
                "facility_id": facility_id,
                "department_id": department_id,
                "district": district,
                "state": state,
            },
        )
        attrs = _resolve_geography(attrs, caller)
        _check_password(password)

        User = get_user_model()
        try:
            with transaction.atomic():
                user = User.objects.create_user(username=email, email=email, password=password)
        except IntegrityError:
            raise ConflictError("Email already in use")

        profile = UserProfile(
            user=user,
            name=name,
            role=role,
            facility_id=attrs.get("facility_id"),
            department_id=attrs.get("department_id"),
            district=attrs.get("district") or "",
            state=attrs.get("state") or "",
        )
        _validate_profile(profile)
        profile.save(force_insert=True)

        logger.info(
            "User created id=%s role=%s by user_id=%s (%s)",
            profile.id,
            role,
            caller.user_id,
            caller.role,
        )
        return profile

    @staticmethod
    @transaction.atomic
    def register(
        *,
        name: str,
        email: str,
        password: str,
        facility_id: UUID,
        department_id: UUID,
    ) -> UserProfile:
        """
        Self-service sign-up: always a department-user, geography copied from the facility.
        """
        email = email.strip().lower()
        if email_taken(email):
            raise ConflictError("Email already in use")

        attrs = _resolve_geography({"facility_id": facility_id, "department_id": department_id})
        _check_password(password)

        User = get_user_model()
        try:
            with transaction.atomic():
                user = User.objects.create_user(username=email, email=email, password=password)
        except IntegrityError:
            raise ConflictError("Email already in use")

        profile = UserProfile(user=user, name=name, role=ROLE_DEPARTMENT_USER, **attrs)
        _validate_profile(profile)
        profile.save(force_insert=True)
        logger.info("User registered id=%s facility=%s", profile.id, facility_id)
        return profile

    @staticmethod
    @transaction.atomic
    def update(*, caller: Caller, profile_id: UUID, patch: Mapping[str, Any]) -> UserProfile:
        profile = user_by_id(profile_id=profile_id)
        assert_record_in_scope(caller, profile, KIND_USERS, "Not authorized to update this user")

        new_role = patch.get("role")
        assert_role_change_allowed(caller, profile.role, new_role)

        scope_attrs = {k: getattr(profile, k) for k in SCOPE_KEYS}
        scope_attrs.update({k: patch[k] for k in SCOPE_KEYS if k in patch})
        if not caller.is_super_admin:
            # the caller's own hierarchy attributes stay stamped on users it manages
            for attr in caller.rule.forced_attributes:
                scope_attrs[attr] = getattr(caller, attr)
        if "department_id" not in patch and str(scope_attrs.get("facility_id")) != str(profile.facility_id):
            # a department never follows its user to another facility
            scope_attrs["department_id"] = None
        scope_attrs = _resolve_geography(scope_attrs, caller)

        if new_role:
            profile.role = new_role
        if "name" in patch:
            profile.name = patch["name"]
        profile.facility_id = scope_attrs.get("facility_id")
        profile.department_id = scope_attrs.get("department_id")
        profile.district = scope_attrs.get("district") or ""
        profile.state = scope_attrs.get("state") or ""
        _validate_profile(profile)

        user = profile.user
        user_fields = []
        if patch.get("email"):
            email = patch["email"].strip().lower()
            if email != user.email:
                if email_taken(email, exclude_user_id=user.pk):
                    raise ConflictError("Email already in use")
                user.username = email
                user.email = email
                user_fields += ["username", "email"]
        if patch.get("password"):
            _check_password(patch["password"], user=user)
            user.set_password(patch["password"])
            user_fields.append("password")
        if user_fields:
            try:
                with transaction.atomic():
                    user.save(update_fields=user_fields)
            except IntegrityError:
                raise ConflictError("Email already in use")

        profile.save()
        return profile

    @staticmethod
    @transaction.atomic
    def delete(*, caller: Caller, profile_id: UUID) -> None:
        profile = user_by_id(profile_id=profile_id)
        assert_can_delete_user(caller, profile)

        if caller.user_id is not None and profile.user_id == caller.user_id:
            raise PermissionDenied("You cannot delete your own account.")

        try:
            with transaction.atomic():
                profile.user.delete()
        except ProtectedError:
            raise ValidationError({"detail": "User is referenced by health data reports and cannot be deleted."})

        logger.info("User deleted id=%s by user_id=%s", profile_id, caller.user_id)
