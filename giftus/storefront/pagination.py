"""
Пагинация каталога: ?page=<n>&page_size=<n>.
"""
from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CatalogPagination(PageNumberPagination):
    page_size = getattr(settings, 'CATALOG_PAGE_SIZE', 10)
    page_size_query_param = 'page_size'
    max_page_size = getattr(settings, 'CATALOG_MAX_PAGE_SIZE', 100)

    def get_paginated_response(self, data):
        return Response({
            'data': data,
            'page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'total': self.page.paginator.count,
        })
