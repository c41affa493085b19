import random
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from storefront.models import Product, ProductVariant


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PENDING_UPI = 'pending_upi', 'Awaiting UPI payment'
    CONFIRMED_COD = 'confirmed_cod', 'Confirmed (cash on delivery)'
    CONFIRMED = 'confirmed', 'Confirmed'
    SHIPPED = 'shipped', 'Shipped'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentMethod(models.TextChoices):
    COD = 'COD', 'Cash on delivery'
    UPI = 'UPI', 'UPI'


class Order(models.Model):
    order_number = models.CharField(max_length=40, unique=True, blank=True)
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField(max_length=200, db_index=True)
    customer_phone = models.CharField(max_length=20)
    delivery_address = models.TextField()

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)],
    )
    discount_code = models.CharField(max_length=50, blank=True, default='')
    gst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, blank=True, default='')
    payment_id = models.CharField(max_length=200, blank=True, default='')
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=500, blank=True, default='')

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer_email', '-created_at'], name='idx_order_email_created'),
            models.Index(fields=['status'], name='idx_order_status'),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        attempts = 0
        while True:
            if not self.order_number:
                self.order_number = self.generate_order_number()
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                break
            except IntegrityError:
                attempts += 1
                if attempts >= 5:
                    raise
                # сбросим номер и попробуем ещё раз
                self.order_number = ''

    @staticmethod
    def generate_order_number():
        """Номер заказа вида ORD-20240115103045-4821 (локальное время + 4 случайные цифры)."""
        prefix = getattr(settings, 'ORDER_NUMBER_PREFIX', 'ORD')
        stamp = timezone.localtime().strftime('%Y%m%d%H%M%S')
        return f"{prefix}-{stamp}-{random.randint(1000, 9999)}"

    @property
    def is_final(self):
        return self.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    variant = models.ForeignKey(ProductVariant, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.product.model_no} x{self.quantity}"


class OrderCustomization(models.Model):
    """Текст гравировки и прочие пожелания к конкретной позиции заказа."""
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name='customizations')
    key = models.CharField(max_length=100)
    value = models.TextField()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.key}: {self.value[:30]}"


class OrderStatusHistory(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='status_history')
    previous_status = models.CharField(max_length=20, choices=OrderStatus.choices, blank=True, default='')
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.CharField(max_length=100, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'Order status history'

    def __str__(self):
        return f"{self.order.order_number}: {self.previous_status or '-'} -> {self.new_status}"
