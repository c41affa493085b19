from django.contrib import admin
from django.utils.html import format_html

from .models import Category, Product, ProductImage, ProductVariant


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'slug')
    prepopulated_fields = {'slug': ('name',)}


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ('variant_name', 'variant_value', 'price', 'stock_qty')


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ('image_url', 'order')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('model_no', 'name', 'category', 'quantity', 'gst_percent', 'is_active', 'thumbnail')
    list_filter = ('is_active', 'is_customizable', 'category')
    search_fields = ('model_no', 'name', 'slug')
    list_select_related = ('category',)
    readonly_fields = ('created_at',)
    inlines = [ProductVariantInline, ProductImageInline]

    def thumbnail(self, obj):
        """Превью основного изображения"""
        if obj.base_image:
            return format_html('<img src="{}" style="height:40px">', obj.base_image.url)
        return '—'
    thumbnail.short_description = 'Image'
