from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class EnvelopePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response({
            "success": True,
            "data": data,
            "total": paginator.count,
            "page": self.page.number,
            "pageSize": paginator.per_page,
            "totalPages": paginator.num_pages,
        })
