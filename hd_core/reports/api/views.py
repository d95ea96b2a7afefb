# backend/hd_core/reports/api/views.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action

from hd_core.common.api.pagination import paginate
from hd_core.common.api.params import parse_uuid
from hd_core.common.api.responses import created, ok
from hd_core.common.permissions import HealthReportPermission
from hd_core.common.scope import get_caller
from hd_core.reports.aggregation import aggregate_reports
from hd_core.reports.api.serializers import (
    AggregateRowSerializer,
    HealthDataReportCreateSerializer,
    HealthDataReportSerializer,
    HealthDataReportUpdateSerializer,
)
from hd_core.reports.selectors import list_reports, report_for_caller
from hd_core.reports.services import HealthReportService

FILTER_PARAMS = [
    OpenApiParameter("year", int, required=False),
    OpenApiParameter("month", int, required=False),
    OpenApiParameter("quarter", int, required=False),
    OpenApiParameter("facility", str, required=False),
    OpenApiParameter("department", str, required=False),
    OpenApiParameter("district", str, required=False),
    OpenApiParameter("state", str, required=False),
]


class HealthReportViewSet(viewsets.ViewSet):
    permission_classes = [HealthReportPermission]

    @extend_schema(
        tags=["Reports"],
        parameters=[
            OpenApiParameter("page", int, required=False),
            OpenApiParameter("limit", int, required=False),
            OpenApiParameter("status", str, required=False),
            *FILTER_PARAMS,
        ],
        responses={200: HealthDataReportSerializer(many=True)},
    )
    def list(self, request):
        qs = list_reports(caller=get_caller(request.user), filters=request.query_params)
        return paginate(request, qs, HealthDataReportSerializer)

    @extend_schema(tags=["Reports"], responses={200: HealthDataReportSerializer})
    def retrieve(self, request, pk=None):
        report = report_for_caller(caller=get_caller(request.user), report_id=parse_uuid(pk, "id"))
        return ok(HealthDataReportSerializer(report).data)

    @extend_schema(
        tags=["Reports"],
        request=HealthDataReportCreateSerializer,
        responses={201: HealthDataReportSerializer},
    )
    def create(self, request):
        s = HealthDataReportCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = dict(s.validated_data)

        report = HealthReportService.create(
            caller=get_caller(request.user),
            facility_id=d.pop("facility"),
            department_id=d.pop("department"),
            **d,
        )
        return created(HealthDataReportSerializer(report).data)

    @extend_schema(
        tags=["Reports"],
        request=HealthDataReportUpdateSerializer,
        responses={200: HealthDataReportSerializer},
    )
    def update(self, request, pk=None):
        s = HealthDataReportUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        report = HealthReportService.update(
            caller=get_caller(request.user),
            report_id=parse_uuid(pk, "id"),
            patch=s.validated_data,
        )
        return ok(HealthDataReportSerializer(report).data)

    partial_update = update

    @extend_schema(tags=["Reports"], responses={200: None})
    def destroy(self, request, pk=None):
        HealthReportService.delete(caller=get_caller(request.user), report_id=parse_uuid(pk, "id"))
        return ok({})

    @extend_schema(
        tags=["Reports"],
        parameters=FILTER_PARAMS,
        responses={200: AggregateRowSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="report")
    def aggregate(self, request):
        rows = aggregate_reports(
            caller=get_caller(request.user),
            filters=request.query_params,
        )
        return ok(rows, count=len(rows))
