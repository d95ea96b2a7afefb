# backend/hd_core/reports/aggregation.py
"""
Roll approved reports up by (district, state, year, month).

The grouping runs in the database. Counters are summed; resource figures
(staffing, beds) are averaged over the reports that contributed to the row.
The caller's scope predicate always applies, and only approved reports are ever
counted, whatever filters are passed in.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from django.db import DatabaseError
from django.db.models import Avg, Count, IntegerField, Sum
from django.db.models.fields.json import KT
from django.db.models.functions import Cast, Coalesce

from hd_core.common.api.exceptions import AggregationFailed
from hd_core.common.scope import Caller
from hd_core.reports.indicators import AVERAGED_CATEGORIES, INDICATOR_SCHEMA
from hd_core.reports.selectors import approved_reports

logger = logging.getLogger(__name__)

GROUP_FIELDS = ("state", "district", "year", "month")


def _alias(category: str, field: str) -> str:
    return f"{category}_{field}"


def _rollup_annotations() -> dict[str, Any]:
    annotations: dict[str, Any] = {}
    for category, fields in INDICATOR_SCHEMA.items():
        fn = Avg if category in AVERAGED_CATEGORIES else Sum
        for field in fields:
            # a missing counter counts as 0
            value = Coalesce(Cast(KT(f"indicators__{category}__{field}"), IntegerField()), 0)
            annotations[_alias(category, field)] = fn(value)
    annotations["facilitiesReporting"] = Count("id")
    return annotations


def _as_row(values: Mapping[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {
        "district": values["district"],
        "state": values["state"],
        "year": values["year"],
        "month": values["month"],
    }
    for category, fields in INDICATOR_SCHEMA.items():
        row[category] = {field: values[_alias(category, field)] for field in fields}
    row["facilitiesReporting"] = values["facilitiesReporting"]
    return row


def aggregate_reports(*, caller: Caller, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
    qs = (
        approved_reports(caller=caller, filters=filters)
        .values(*GROUP_FIELDS)
        .annotate(**_rollup_annotations())
        .order_by(*GROUP_FIELDS)
    )

    try:
        rows = [_as_row(values) for values in qs]
    except (DatabaseError, TypeError, ValueError) as e:
        logger.exception("Aggregation failed for user_id=%s (%s): %s", caller.user_id, caller.role, e)
        raise AggregationFailed()

    logger.debug("Aggregated %d rows for user_id=%s", len(rows), caller.user_id)
    return rows
