import math

from django.core.paginator import Page
from rest_framework.exceptions import NotFound
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    ?page=<n>&limit=<m>  ->  {success, data, pagination: {page, limit, total, totalPages}}
    """
    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        try:
            return super().paginate_queryset(queryset, request, view)
        except NotFound:
            number = self._requested_page_number(request)
            if number is None:
                raise
            # Past the last page: empty data, real totals
            paginator = self.django_paginator_class(queryset, self.get_page_size(request))
            self.page = Page([], number, paginator)
            return []

    def _requested_page_number(self, request):
        try:
            number = int(request.query_params.get(self.page_query_param, ""))
        except ValueError:
            return None
        return number if number > 1 else None

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response({
            "success": True,
            "data": data,
            "pagination": {
                "page": self.page.number,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "data": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                    },
                },
            },
        }


class MediaResultsSetPagination(StandardResultsSetPagination):
    page_size = 20
