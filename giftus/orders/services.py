"""
Order lifecycle: creation with totals, payment method selection, confirmation,
cancellation and fulfilment status changes.

Every status change writes an OrderStatusHistory row in the same transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from storefront.models import ProductVariant

from .models import (
    Order,
    OrderCustomization,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    PaymentMethod,
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
SYSTEM_ACTOR = 'System'
DEFAULT_CANCEL_REASON = 'User requested cancellation'

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    'pending': frozenset({'pending_upi', 'confirmed_cod', 'confirmed', 'cancelled'}),
    'pending_upi': frozenset({'confirmed', 'confirmed_cod', 'cancelled'}),
    'confirmed_cod': frozenset({'shipped', 'cancelled'}),
    'confirmed': frozenset({'shipped', 'cancelled'}),
    'shipped': frozenset({'completed'}),
    'completed': frozenset(),
    'cancelled': frozenset(),
}

PAYMENT_SELECTABLE_STATUSES = frozenset({'pending', 'pending_upi'})


class OrderError(Exception):
    """Операция над заказом невозможна в его текущем состоянии."""


class InvalidStatusTransition(OrderError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from '{current}' to '{target}'")


@dataclass
class OrderItemInput:
    product_id: int
    variant_id: int
    quantity: int
    customizations: Dict[str, str] = field(default_factory=dict)


@dataclass
class OrderInput:
    customer_name: str
    customer_email: str
    customer_phone: str
    delivery_address: str
    items: List[OrderItemInput]
    discount_code: str = ''
    discount_amount: Decimal = Decimal('0.00')
    notes: str = ''


@dataclass
class OrderTotals:
    subtotal: Decimal
    gst_amount: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def _money(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def shipping_cost() -> Decimal:
    return _money(str(getattr(settings, 'ORDER_SHIPPING_COST', '50.00')))


def calculate_totals(lines: Iterable[tuple], discount_amount=Decimal('0.00')) -> OrderTotals:
    """
    Totals for (unit_price, quantity, gst_percent) lines.

    GST is charged per line on the line subtotal; the discount cannot push the
    total below zero.
    """
    subtotal = Decimal('0.00')
    gst_amount = Decimal('0.00')
    for unit_price, quantity, gst_percent in lines:
        line_subtotal = _money(Decimal(unit_price) * quantity)
        subtotal += line_subtotal
        gst_amount += _money(line_subtotal * Decimal(gst_percent) / Decimal('100'))

    shipping = shipping_cost()
    gross = subtotal + gst_amount + shipping
    discount = min(max(_money(discount_amount or 0), Decimal('0.00')), gross)
    return OrderTotals(
        subtotal=_money(subtotal),
        gst_amount=_money(gst_amount),
        shipping_cost=shipping,
        discount_amount=discount,
        total_amount=_money(gross - discount),
    )


def record_status(order: Order, previous_status: str, notes: str = '', changed_by: str = '') -> OrderStatusHistory:
    return OrderStatusHistory.objects.create(
        order=order,
        previous_status=previous_status or '',
        new_status=order.status,
        changed_by=changed_by,
        notes=notes,
    )


@transaction.atomic
def create_order(data: OrderInput) -> Order:
    """
    Create an order priced from the current catalog.

    Unit prices come from the variants in the database, never from the client.
    Raises OrderError when an item references a missing or inactive product.
    """
    if not data.items:
        raise OrderError('Order must contain at least one item')

    variant_ids = [item.variant_id for item in data.items]
    variants = ProductVariant.objects.select_related('product').in_bulk(variant_ids)

    lines = []
    for item in data.items:
        variant = variants.get(item.variant_id)
        if variant is None or variant.product_id != item.product_id:
            raise OrderError(f'Variant {item.variant_id} not found for product {item.product_id}')
        if not variant.product.is_active:
            raise OrderError(f'Product {variant.product.model_no} is not available')
        if item.quantity < 1:
            raise OrderError('Quantity must be at least 1')
        lines.append((item, variant))

    totals = calculate_totals(
        ((variant.price, item.quantity, variant.product.gst_percent) for item, variant in lines),
        discount_amount=data.discount_amount,
    )

    order = Order.objects.create(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        delivery_address=data.delivery_address,
        subtotal=totals.subtotal,
        gst_amount=totals.gst_amount,
        shipping_cost=totals.shipping_cost,
        discount_amount=totals.discount_amount,
        discount_code=data.discount_code or '',
        total_amount=totals.total_amount,
        notes=data.notes or '',
        status=OrderStatus.PENDING,
    )

    for item, variant in lines:
        order_item = OrderItem.objects.create(
            order=order,
            product=variant.product,
            variant=variant,
            quantity=item.quantity,
            price=variant.price,
            subtotal=_money(variant.price * item.quantity),
        )
        OrderCustomization.objects.bulk_create([
            OrderCustomization(order_item=order_item, key=key, value=str(value))
            for key, value in (item.customizations or {}).items()
        ])

    record_status(order, previous_status='', notes='Order created')
    logger.info(f"Order {order.order_number} created: total {order.total_amount}, {len(lines)} items")
    return order


def get_order(order_id) -> Optional[Order]:
    return (
        Order.objects
        .prefetch_related('items__product', 'items__variant', 'items__customizations', 'status_history')
        .filter(pk=order_id)
        .first()
    )


def get_customer_orders(email: str):
    """Заказы клиента по email, новые сверху."""
    return (
        Order.objects
        .filter(customer_email__iexact=(email or '').strip())
        .annotate(item_count=Count('items'))
        .order_by('-created_at', '-id')
    )


def _lock(order: Order) -> Order:
    return Order.objects.select_for_update().get(pk=order.pk)


@transaction.atomic
def change_status(order: Order, new_status: str, *, changed_by: str = '', notes: str = '') -> Order:
    """Fulfilment status change validated against ALLOWED_TRANSITIONS."""
    order = _lock(order)
    if new_status not in OrderStatus.values:
        raise OrderError(f"Unknown order status '{new_status}'")
    if new_status not in ALLOWED_TRANSITIONS.get(order.status, frozenset()):
        raise InvalidStatusTransition(order.status, new_status)

    previous = order.status
    order.status = new_status
    update_fields = ['status', 'updated_at']
    now = timezone.now()
    if new_status == OrderStatus.COMPLETED:
        order.completed_at = now
        update_fields.append('completed_at')
    elif new_status == OrderStatus.CANCELLED:
        order.cancelled_at = now
        order.cancel_reason = notes or order.cancel_reason
        update_fields.extend(['cancelled_at', 'cancel_reason'])
    order.save(update_fields=update_fields)
    record_status(order, previous, notes=notes, changed_by=changed_by)
    logger.info(f"Order {order.order_number}: {previous} -> {new_status}")
    return order


@transaction.atomic
def update_payment_method(order: Order, payment_method: str, upi_id: str = '') -> Order:
    """
    COD подтверждает заказ сразу, UPI переводит в ожидание оплаты.
    """
    order = _lock(order)
    if payment_method not in PaymentMethod.values:
        raise OrderError(f"Unsupported payment method '{payment_method}'")
    if order.status not in PAYMENT_SELECTABLE_STATUSES:
        raise OrderError(f"Payment method cannot be changed for order in status '{order.status}'")

    previous = order.status
    order.payment_method = payment_method
    if payment_method == PaymentMethod.UPI and upi_id:
        order.payment_id = upi_id
    order.status = OrderStatus.CONFIRMED_COD if payment_method == PaymentMethod.COD else OrderStatus.PENDING_UPI
    if order.status == previous:
        # Повторный выбор UPI: меняется только UPI id, история не пишется
        order.save(update_fields=['payment_method', 'payment_id', 'updated_at'])
        logger.info(f"Order {order.order_number}: UPI id updated")
        return order
    order.save(update_fields=['payment_method', 'payment_id', 'status', 'updated_at'])
    record_status(order, previous, notes=f'Payment method selected: {payment_method}')
    logger.info(f"Order {order.order_number}: payment method {payment_method}")
    return order


@transaction.atomic
def confirm_payment(order: Order, payment_id: str) -> Order:
    """Mark an online payment as received. Gateway signatures are checked upstream."""
    order = _lock(order)
    if order.status not in (OrderStatus.PENDING, OrderStatus.PENDING_UPI):
        raise InvalidStatusTransition(order.status, OrderStatus.CONFIRMED)

    previous = order.status
    order.payment_id = payment_id
    order.status = OrderStatus.CONFIRMED
    order.save(update_fields=['payment_id', 'status', 'updated_at'])
    record_status(order, previous, notes='Payment verified')
    logger.info(f"Payment verified and order confirmed. Order: {order.order_number}, payment: {payment_id}")
    return order


@transaction.atomic
def cancel_order(order: Order, reason: str = DEFAULT_CANCEL_REASON) -> bool:
    """
    Cancel an order; returns False when it is already cancelled or completed.
    """
    order = _lock(order)
    if order.is_final:
        return False

    previous = order.status
    order.status = OrderStatus.CANCELLED
    order.cancelled_at = timezone.now()
    reason = reason or DEFAULT_CANCEL_REASON
    order.cancel_reason = reason
    order.save(update_fields=['status', 'cancelled_at', 'cancel_reason', 'updated_at'])
    record_status(order, previous, notes=reason, changed_by=SYSTEM_ACTOR)
    logger.info(f"Order {order.order_number} cancelled: {reason}")
    return True
