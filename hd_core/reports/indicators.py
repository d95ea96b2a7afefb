# backend/hd_core/reports/indicators.py
"""
Fixed indicator schema for monthly health data reports.

Each category is a closed set of non-negative counters. Unknown categories or
fields are rejected; omitted ones default to 0. Rollup is a sum for every
category except the averaged ones (staffing/bed capacity).
"""
from __future__ import annotations

from rest_framework import serializers

INDICATOR_SCHEMA: dict[str, tuple[str, ...]] = {
    "maternalHealth": (
        "antenatalRegistrations",
        "institutionalDeliveries",
        "homeDeliveries",
        "maternalDeaths",
        "highRiskPregnancies",
    ),
    "childHealth": (
        "newbornRegistered",
        "fullImmunization",
        "lowBirthWeight",
        "childDeaths",
        "malnutritionCases",
    ),
    "diseaseControl": (
        "tbCasesDetected",
        "tbCasesTreated",
        "malariaPositive",
        "denguePositive",
        "hivTestedPositive",
    ),
    "outpatientServices": ("totalOPDVisits",),
    "inpatientServices": ("totalAdmissions", "totalDischarges", "totalDeaths"),
    "surgicalProcedures": ("majorSurgeries", "minorSurgeries"),
    "laboratoryServices": ("totalLabTests",),
    "resources": ("doctorsAvailable", "nursesAvailable", "totalBeds"),
}

AVERAGED_CATEGORIES = frozenset({"resources"})
SUMMED_CATEGORIES = tuple(c for c in INDICATOR_SCHEMA if c not in AVERAGED_CATEGORIES)


def empty_indicators() -> dict[str, dict[str, int]]:
    return {category: {field: 0 for field in fields} for category, fields in INDICATOR_SCHEMA.items()}


class StrictSerializer(serializers.Serializer):
    """Rejects keys that are not declared fields."""

    def to_internal_value(self, data):
        if isinstance(data, dict):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError({key: "Unknown field." for key in unknown})
        return super().to_internal_value(data)


def _category_serializer(category: str, fields: tuple[str, ...]) -> type[StrictSerializer]:
    attrs = {name: serializers.IntegerField(min_value=0, default=0) for name in fields}
    return type(f"{category[0].upper()}{category[1:]}Serializer", (StrictSerializer,), attrs)


CATEGORY_SERIALIZERS = {
    category: _category_serializer(category, fields) for category, fields in INDICATOR_SCHEMA.items()
}


class IndicatorsSerializer(StrictSerializer):
    def get_fields(self):
        return {category: ser(required=False) for category, ser in CATEGORY_SERIALIZERS.items()}

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        full = empty_indicators()
        for category, counters in value.items():
            full[category].update(counters)
        return full


def validate_indicators(data) -> dict[str, dict[str, int]]:
    """Validate a raw indicators payload; returns the complete zero-filled structure."""
    s = IndicatorsSerializer(data=data)
    s.is_valid(raise_exception=True)
    return s.validated_data
