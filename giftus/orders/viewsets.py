"""
REST API заказов.
"""

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from . import services
from .models import Order
from .serializers import (
    CancelOrderSerializer,
    ConfirmPaymentSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderSummarySerializer,
    StatusChangeSerializer,
    UpdatePaymentSerializer,
)

logger = logging.getLogger(__name__)


class OrderViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    ViewSet для заказов.

    Предоставляет:
        - create: POST /api/orders/
        - retrieve: GET /api/orders/{id}/
        - customer: GET /api/orders/customer/{email}/
        - update_payment: POST /api/orders/{id}/update-payment/
        - confirm_payment: POST /api/orders/{id}/confirm-payment/
        - cancel: POST /api/orders/{id}/cancel/
        - set_status: POST /api/orders/{id}/status/
    """
    permission_classes = [AllowAny]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return Order.objects.prefetch_related(
            'items__product', 'items__variant', 'items__customizations', 'status_history'
        )

    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = services.create_order(serializer.to_order_input())
        except services.OrderError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'order_id': order.pk,
            'order_number': order.order_number,
            'amount': str(order.total_amount),
            'message': 'Order created successfully. Proceed to payment.',
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path=r'customer/(?P<email>[^/]+)')
    def customer(self, request, email=None):
        """Заказы клиента по email, новые сверху."""
        orders = services.get_customer_orders(email)
        serializer = OrderSummarySerializer(orders, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'], url_path='update-payment')
    def update_payment(self, request, pk=None):
        order = self.get_object()
        serializer = UpdatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = services.update_payment_method(
                order,
                serializer.validated_data['payment_method'],
                upi_id=serializer.validated_data.get('upi_id', ''),
            )
        except services.OrderError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': 'Payment method updated successfully',
            'order_id': order.pk,
            'payment_method': order.payment_method,
            'status': order.status,
        })

    @action(detail=True, methods=['post'], url_path='confirm-payment')
    def confirm_payment(self, request, pk=None):
        order = self.get_object()
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = services.confirm_payment(order, serializer.validated_data['payment_id'])
        except services.OrderError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': 'Payment verified successfully',
            'order_id': order.pk,
            'status': order.status,
        })

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        order = self.get_object()
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not services.cancel_order(order, serializer.validated_data['reason']):
            return Response(
                {'error': 'Order cannot be cancelled (already cancelled or completed)'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response({'message': 'Order cancelled successfully', 'order_id': order.pk})

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """Смена статуса выполнения (shipped, completed и т.д.)."""
        order = self.get_object()
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = services.change_status(
                order,
                serializer.validated_data['status'],
                changed_by=serializer.validated_data.get('changed_by', ''),
                notes=serializer.validated_data.get('notes', ''),
            )
        except services.OrderError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(self.get_queryset().get(pk=order.pk)).data)
