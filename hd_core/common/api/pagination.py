from __future__ import annotations

import math
import re

from rest_framework.pagination import BasePagination
from rest_framework.response import Response


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _positive_int(raw, default: int) -> int:
    # parseInt(x) || default: leading digits count ("20abc" is 20); junk, zero and negatives fall back
    match = _LEADING_INT.match(raw) if isinstance(raw, str) else None
    if match is None:
        return default
    value = int(match.group(1))
    return value if value > 0 else default


class PageLimitPagination(BasePagination):
    """
    ?page=N&limit=M pagination.

    Contract:
      { success, count, total, pagination: {page, limit, pages}, data }
    where pages = ceil(total / limit).
    """
    default_page = 1
    default_limit = 10
    page_query_param = "page"
    limit_query_param = "limit"

    def paginate_queryset(self, queryset, request, view=None):
        self.page = _positive_int(request.query_params.get(self.page_query_param), self.default_page)
        self.limit = _positive_int(request.query_params.get(self.limit_query_param), self.default_limit)
        self.total = queryset.count()

        start = (self.page - 1) * self.limit
        return list(queryset[start:start + self.limit])

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def get_paginated_response(self, data):
        return Response(
            {
                "success": True,
                "count": len(data),
                "total": self.total,
                "pagination": {
                    "page": self.page,
                    "limit": self.limit,
                    "pages": self.pages,
                },
                "data": data,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "count": {"type": "integer"},
                "total": {"type": "integer"},
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "pages": {"type": "integer"},
                    },
                },
                "data": schema,
            },
        }


def paginate(request, queryset, serializer_class, *, paginator: PageLimitPagination | None = None) -> Response:
    """
    Shared pagination helper to enforce a stable list contract.
    """
    p = paginator or PageLimitPagination()
    page = p.paginate_queryset(queryset, request)
    ser = serializer_class(page, many=True)
    return p.get_paginated_response(ser.data)
