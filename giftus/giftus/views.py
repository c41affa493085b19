"""
Служебные endpoints: приветствие и health-check.
"""
import logging

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)

SERVICE_NAME = 'Giftus API'
SERVICE_VERSION = '1.0.0'


@api_view(['GET'])
@permission_classes([AllowAny])
def welcome(request):
    return Response({
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'timestamp': timezone.now(),
        'endpoints': {
            'categories': '/api/categories/',
            'products': '/api/products/',
            'bulk_upload': '/api/bulk-upload/upload-matrix/',
            'bulk_upload_template': '/api/bulk-upload/template-matrix/',
            'cart': '/api/cart/',
            'orders': '/api/orders/',
            'health': '/api/health/',
        },
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Проверка живости сервиса и доступности БД."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError as exc:
        logger.error(f"Health check: database unavailable: {exc}")
        return Response(
            {'status': 'unhealthy', 'database': 'unavailable', 'timestamp': timezone.now()},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    return Response({'status': 'healthy', 'database': 'ok', 'timestamp': timezone.now()})
