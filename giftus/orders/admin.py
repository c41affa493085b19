"""
Административная панель для заказов
"""
from django.contrib import admin

from .models import Order, OrderCustomization, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    """Inline для отображения товаров в заказе"""
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'variant', 'quantity', 'price', 'subtotal')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ('previous_status', 'new_status', 'changed_by', 'notes', 'created_at')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'customer_name', 'customer_email', 'status',
                    'payment_method', 'total_amount', 'created_at')
    list_filter = ('status', 'payment_method', 'created_at')
    search_fields = ('order_number', 'customer_name', 'customer_email', 'customer_phone')
    readonly_fields = ('order_number', 'subtotal', 'gst_amount', 'shipping_cost', 'total_amount',
                       'created_at', 'updated_at', 'completed_at', 'cancelled_at')

    fieldsets = (
        ('Order', {
            'fields': ('order_number', 'status', 'created_at', 'updated_at')
        }),
        ('Customer', {
            'fields': ('customer_name', 'customer_email', 'customer_phone', 'delivery_address')
        }),
        ('Payment', {
            'fields': ('payment_method', 'payment_id', 'subtotal', 'gst_amount', 'shipping_cost',
                       'discount_code', 'discount_amount', 'total_amount')
        }),
        ('Additional', {
            'fields': ('notes', 'completed_at', 'cancelled_at', 'cancel_reason'),
            'classes': ('collapse',)
        }),
    )

    inlines = [OrderItemInline, OrderStatusHistoryInline]


@admin.register(OrderCustomization)
class OrderCustomizationAdmin(admin.ModelAdmin):
    list_display = ('order_item', 'key', 'value')
    search_fields = ('key', 'value', 'order_item__order__order_number')
