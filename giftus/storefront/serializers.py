"""
Django REST Framework Serializers for Storefront API.

Сериализаторы для преобразования моделей в JSON и обратно.
Используются ViewSets для автоматической генерации API endpoints.
"""

from decimal import Decimal

from django.conf import settings
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import Category, Product, ProductImage, ProductVariant
from .utils import unique_slugify


class CategorySerializer(serializers.ModelSerializer):
    """
    Сериализатор для категорий товаров.

    Fields:
        - id: ID категории
        - name: Название категории
        - slug: URL slug (уникальный)
        - description: Описание
        - is_active: Активна ли категория
        - products_count: Количество товаров (read-only)
    """
    slug = serializers.SlugField(
        max_length=120,
        required=False,
        validators=[UniqueValidator(queryset=Category.objects.all(), message='Slug already exists')],
    )
    name = serializers.CharField(
        max_length=100,
        validators=[UniqueValidator(queryset=Category.objects.all(), message='Category already exists')],
    )
    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'is_active', 'products_count', 'created_at']
        read_only_fields = ['id', 'created_at']

    def get_products_count(self, obj):
        """Возвращает количество товаров в категории."""
        annotated = getattr(obj, 'products_count_annotated', None)
        if annotated is not None:
            return annotated
        return obj.products.count()

    def create(self, validated_data):
        if not validated_data.get('slug'):
            validated_data['slug'] = unique_slugify(Category, validated_data['name'])
        return super().create(validated_data)


class ProductVariantSerializer(serializers.ModelSerializer):
    """
    Вариант товара (обычно размер) со своей ценой и остатком.
    """
    variant_name = serializers.CharField(max_length=50, required=False, default=ProductVariant.DEFAULT_NAME)
    stock_qty = serializers.IntegerField(min_value=0, required=False, default=0)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))

    class Meta:
        model = ProductVariant
        fields = ['id', 'variant_name', 'variant_value', 'price', 'stock_qty']
        read_only_fields = ['id']


class ProductImageSerializer(serializers.ModelSerializer):
    order = serializers.IntegerField(min_value=0, required=False, default=0)

    class Meta:
        model = ProductImage
        fields = ['id', 'image_url', 'order', 'created_at']
        read_only_fields = ['id', 'created_at']


class ProductListSerializer(serializers.ModelSerializer):
    """
    Сериализатор для списка товаров (минимальная информация).

    Оптимизирован для быстрой загрузки списков.
    """
    category = serializers.CharField(source='category.name', read_only=True)
    category_id = serializers.IntegerField(read_only=True)
    image = serializers.SerializerMethodField()
    min_price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'model_no', 'name', 'slug', 'image', 'short_description',
            'category', 'category_id', 'gst_percent', 'quantity', 'min_price',
            'is_customizable', 'is_active',
        ]
        read_only_fields = fields

    def get_image(self, obj):
        """Возвращает URL главного изображения."""
        if obj.base_image:
            request = self.context.get('request')
            if request:
                return request.build_absolute_uri(obj.base_image.url)
            return obj.base_image.url
        return None

    def get_min_price(self, obj):
        prices = [variant.price for variant in obj.variants.all()]
        if not prices:
            return None
        return str(min(prices))


class ProductDetailSerializer(ProductListSerializer):
    """
    Сериализатор для детальной информации о товаре.

    Включает варианты и галерею изображений.
    """
    variants = ProductVariantSerializer(many=True, read_only=True)
    images = ProductImageSerializer(many=True, read_only=True)

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ['video_url', 'variants', 'images', 'created_at']
        read_only_fields = fields


class CategoryDetailSerializer(CategorySerializer):
    products = ProductListSerializer(many=True, read_only=True)

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ['products']


class ProductWriteSerializer(serializers.ModelSerializer):
    """
    Создание и обновление товара из админки.

    category передаётся как ID; slug генерируется из model_no и name, если не задан.
    """
    category = serializers.IntegerField(source='category_id')
    model_no = serializers.RegexField(
        r'^[A-Za-z0-9\-_\s]+$',
        max_length=100,
        validators=[UniqueValidator(queryset=Product.objects.all(), message='ModelNo already exists')],
        error_messages={'invalid': 'ModelNo may contain only letters, numbers, hyphens, underscores and spaces'},
    )
    slug = serializers.SlugField(
        max_length=220,
        required=False,
        validators=[UniqueValidator(queryset=Product.objects.all(), message='Slug already exists')],
    )
    gst_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False,
    )
    is_customizable = serializers.BooleanField(required=False, default=True)

    class Meta:
        model = Product
        fields = [
            'id', 'category', 'model_no', 'name', 'slug', 'base_image', 'video_url',
            'short_description', 'gst_percent', 'quantity', 'is_customizable', 'is_active',
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'base_image': {'required': False, 'allow_null': True},
            'quantity': {'required': False},
        }

    def validate_category(self, value):
        if not Category.objects.filter(pk=value).exists():
            raise serializers.ValidationError('Category not found')
        return value

    def create(self, validated_data):
        if not validated_data.get('slug'):
            validated_data['slug'] = unique_slugify(
                Product, f"{validated_data['model_no']}-{validated_data['name']}"
            )
        validated_data.setdefault(
            'gst_percent', Decimal(str(getattr(settings, 'DEFAULT_GST_PERCENT', '18.00')))
        )
        return super().create(validated_data)


class CartItemSerializer(serializers.Serializer):
    """
    Валидация добавления варианта товара в корзину.
    """
    variant_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=1000, default=1)
    customizations = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class CheckoutSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=200)
    customer_email = serializers.EmailField(max_length=200)
    customer_phone = serializers.RegexField(r'^\+?[0-9\s\-]{7,20}$', max_length=20)
    delivery_address = serializers.CharField()
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
