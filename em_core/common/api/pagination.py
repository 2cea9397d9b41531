from __future__ import annotations

from rest_framework.exceptions import ValidationError
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _non_negative_int(raw, *, name: str, default: int, minimum: int = 0) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: f"'{raw}' is not a valid integer"})
    if value < minimum:
        raise ValidationError({name: f"must be greater than or equal to {minimum}"})
    return value


class PageSizePagination(BasePagination):
    """
    Zero-based `page` + `size` query parameters; the body is the plain list.
    """
    page_query_param = "page"
    size_query_param = "size"
    default_size = 10
    max_size = 200

    def paginate_queryset(self, queryset, request, view=None):
        page = _non_negative_int(
            request.query_params.get(self.page_query_param),
            name=self.page_query_param,
            default=0,
        )
        size = _non_negative_int(
            request.query_params.get(self.size_query_param),
            name=self.size_query_param,
            default=self.default_size,
            minimum=1,
        )
        size = min(size, self.max_size)
        offset = page * size
        return list(queryset[offset:offset + size])

    def get_paginated_response(self, data):
        return Response(data)


def paginate(request, queryset, serializer_class, *, context: dict | None = None,
             paginator: BasePagination | None = None) -> Response:
    """
    Shared pagination helper so list endpoints all read `page`/`size` the same way.
    """
    p = paginator or PageSizePagination()
    page = p.paginate_queryset(queryset, request)
    ser = serializer_class(page, many=True, context=context or {"request": request})
    return p.get_paginated_response(ser.data)
