# backend/hd_core/common/tests/test_params.py
from uuid import uuid4

import pytest
from rest_framework.exceptions import ValidationError

from hd_core.common.api.params import parse_uuid, uuid_or_none


def test_parse_uuid_accepts_uuid_and_string():
    value = uuid4()
    assert parse_uuid(value, "id") == value
    assert parse_uuid(str(value), "id") == value


@pytest.mark.parametrize("raw", ["nope", "", None, 42])
def test_parse_uuid_rejects_junk_with_field_name(raw):
    with pytest.raises(ValidationError) as exc:
        parse_uuid(raw, "facility")
    assert "facility" in exc.value.detail


def test_uuid_or_none_treats_blank_as_absent():
    assert uuid_or_none(None, "facility") is None
    assert uuid_or_none("", "facility") is None
    with pytest.raises(ValidationError):
        uuid_or_none("abc", "facility")
