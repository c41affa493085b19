from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


def default_gst_percent():
    return Decimal(str(getattr(settings, 'DEFAULT_GST_PERCENT', '18.00')))


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True, verbose_name='Name')
    slug = models.SlugField(max_length=120, unique=True)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True, verbose_name='Active')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='idx_category_active'),
        ]

    def __str__(self):
        return self.name


class Product(models.Model):
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='products',
    )
    # Артикул из прайса, ключ идемпотентного импорта
    model_no = models.CharField(max_length=100, unique=True, verbose_name='Model No')
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    base_image = models.ImageField(upload_to='products/', blank=True, null=True)
    video_url = models.URLField(max_length=500, blank=True, default='')
    short_description = models.CharField(max_length=500, blank=True, default='')
    gst_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=default_gst_percent,
        validators=[MinValueValidator(0)],
        verbose_name='GST %',
    )
    quantity = models.PositiveIntegerField(default=0, verbose_name='Stock quantity')
    is_customizable = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active', 'name'], name='idx_product_active_name'),
            models.Index(fields=['category', 'is_active'], name='idx_product_category_active'),
        ]

    def __str__(self):
        return f'{self.model_no} - {self.name}'

    @property
    def base_image_url(self):
        if self.base_image:
            return self.base_image.url
        return ''


class ProductVariant(models.Model):
    DEFAULT_NAME = 'Size'

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    variant_name = models.CharField(max_length=50, default=DEFAULT_NAME)
    variant_value = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    stock_qty = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = 'Variant'
        verbose_name_plural = 'Variants'
        ordering = ['product', 'variant_name', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'variant_name', 'variant_value'],
                name='uniq_product_variant',
            ),
        ]

    def __str__(self):
        return f'{self.product.model_no}: {self.variant_name} {self.variant_value}'


class ProductImage(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    image_url = models.CharField(max_length=500)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Product image'
        verbose_name_plural = 'Product images'
        ordering = ['order', 'id']

    def __str__(self):
        return f'{self.product.model_no} #{self.order}'
