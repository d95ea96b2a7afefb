# backend/hd_core/reports/tests/test_indicators.py
import pytest
from rest_framework.exceptions import ValidationError

from hd_core.reports.indicators import (
    AVERAGED_CATEGORIES,
    INDICATOR_SCHEMA,
    SUMMED_CATEGORIES,
    empty_indicators,
    validate_indicators,
)


def test_schema_has_eight_categories():
    assert len(INDICATOR_SCHEMA) == 8
    assert AVERAGED_CATEGORIES == {"resources"}
    assert "resources" not in SUMMED_CATEGORIES
    assert len(SUMMED_CATEGORIES) == 7


def test_omitted_categories_and_fields_default_to_zero():
    data = validate_indicators({"maternalHealth": {"institutionalDeliveries": 12}})

    assert set(data) == set(INDICATOR_SCHEMA)
    assert data["maternalHealth"]["institutionalDeliveries"] == 12
    assert data["maternalHealth"]["homeDeliveries"] == 0
    assert data["resources"] == {"doctorsAvailable": 0, "nursesAvailable": 0, "totalBeds": 0}


def test_empty_payload_is_all_zero():
    assert validate_indicators({}) == empty_indicators()


def test_unknown_category_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_indicators({"dentalHealth": {"fillings": 3}})
    assert "dentalHealth" in exc.value.detail


def test_unknown_field_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_indicators({"childHealth": {"newbornRegistered": 1, "twins": 2}})
    assert "twins" in exc.value.detail["childHealth"]


@pytest.mark.parametrize("bad", [-1, "many", None])
def test_counters_must_be_non_negative_numbers(bad):
    with pytest.raises(ValidationError):
        validate_indicators({"outpatientServices": {"totalOPDVisits": bad}})


def test_category_must_be_an_object():
    with pytest.raises(ValidationError):
        validate_indicators({"resources": [1, 2, 3]})


def test_empty_indicators_returns_fresh_copies():
    a = empty_indicators()
    a["resources"]["totalBeds"] = 99
    assert empty_indicators()["resources"]["totalBeds"] == 0
