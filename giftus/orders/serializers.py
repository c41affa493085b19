"""
Сериализаторы API заказов.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentMethod
from .services import DEFAULT_CANCEL_REASON, OrderInput, OrderItemInput


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    variant_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=1000)
    customizations = serializers.DictField(
        child=serializers.CharField(allow_blank=True), required=False, default=dict
    )


class OrderCreateSerializer(serializers.Serializer):
    """
    Данные для создания заказа. Цены позиций не принимаются от клиента.
    """
    customer_name = serializers.CharField(max_length=200)
    customer_email = serializers.EmailField(max_length=200)
    customer_phone = serializers.RegexField(r'^\+?[0-9\s\-]{7,20}$', max_length=20)
    delivery_address = serializers.CharField()
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    discount_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, default=Decimal('0.00')
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_order_input(self) -> OrderInput:
        data = self.validated_data
        return OrderInput(
            customer_name=data['customer_name'],
            customer_email=data['customer_email'],
            customer_phone=data['customer_phone'],
            delivery_address=data['delivery_address'],
            discount_code=data.get('discount_code', ''),
            discount_amount=data.get('discount_amount', Decimal('0.00')),
            notes=data.get('notes', ''),
            items=[
                OrderItemInput(
                    product_id=item['product_id'],
                    variant_id=item['variant_id'],
                    quantity=item['quantity'],
                    customizations=item.get('customizations') or {},
                )
                for item in data['items']
            ],
        )


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    model_no = serializers.CharField(source='product.model_no', read_only=True)
    variant_name = serializers.CharField(source='variant.variant_name', read_only=True)
    variant_value = serializers.CharField(source='variant.variant_value', read_only=True)
    customizations = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            'id', 'product_id', 'product_name', 'model_no', 'variant_id',
            'variant_name', 'variant_value', 'quantity', 'price', 'subtotal', 'customizations',
        ]
        read_only_fields = fields

    def get_customizations(self, obj):
        return {c.key: c.value for c in obj.customizations.all()}


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ['previous_status', 'new_status', 'changed_by', 'notes', 'created_at']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Полная информация о заказе: позиции и история статусов (новые сверху).
    """
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer_name', 'customer_email', 'customer_phone',
            'delivery_address', 'subtotal', 'gst_amount', 'shipping_cost', 'discount_code',
            'discount_amount', 'total_amount', 'payment_method', 'payment_id', 'status',
            'notes', 'created_at', 'updated_at', 'completed_at', 'cancelled_at', 'cancel_reason',
            'items', 'status_history',
        ]
        read_only_fields = fields


class OrderSummarySerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'status', 'payment_method', 'total_amount', 'item_count', 'created_at']
        read_only_fields = fields


class UpdatePaymentSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    upi_id = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_id = serializers.CharField(max_length=200)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default=DEFAULT_CANCEL_REASON)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    changed_by = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
