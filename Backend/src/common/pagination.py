import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PagePerPagination(PageNumberPagination):
    """
    Pagination ?page=1&per=10 (per <= 50).
    Reponse: {"success": true, "data": [...], "pagination": {page, per, total, pages, hasNext}}
    """

    page_size = 10
    page_query_param = "page"
    page_size_query_param = "per"
    max_page_size = 50

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        per = paginator.per_page
        return Response({
            "success": True,
            "data": data,
            "pagination": {
                "page": self.page.number,
                "per": per,
                "total": paginator.count,
                "pages": math.ceil(paginator.count / per) if per else 0,
                "hasNext": self.page.has_next(),
            },
        })
