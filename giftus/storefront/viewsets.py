"""
Django REST Framework ViewSets for Storefront API.

ViewSets обеспечивают CRUD операции и кастомные endpoints для API.
Используют сериализаторы для преобразования данных в JSON.
"""

import logging
import os

from django.conf import settings
from django.db.models import Count, ProtectedError
from django.http import HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from orders.services import OrderError, OrderInput, OrderItemInput, create_order

from .models import Category, Product, ProductVariant
from .pagination import CatalogPagination
from .serializers import (
    CartItemSerializer,
    CategoryDetailSerializer,
    CategorySerializer,
    CheckoutSerializer,
    ProductDetailSerializer,
    ProductImageSerializer,
    ProductListSerializer,
    ProductVariantSerializer,
    ProductWriteSerializer,
)
from .services.matrix_import import (
    SUMMARY_MESSAGE,
    TEMPLATE_FILENAME,
    XLSX_CONTENT_TYPE,
    MatrixImportError,
    build_matrix_template,
    import_matrix_workbook,
)
from .utils import build_cart_lines, cart_count, get_cart_from_session, save_cart_to_session

logger = logging.getLogger(__name__)


class CategoryViewSet(viewsets.ModelViewSet):
    """
    ViewSet для категорий товаров.

    Предоставляет:
        - list: GET /api/categories/ - активные категории по алфавиту
        - retrieve: GET /api/categories/{id}/ - категория с товарами
        - create / update / destroy

    Performance: Использует annotate для products_count чтобы избежать N+1 queries
    """
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        queryset = Category.objects.annotate(
            products_count_annotated=Count('products')
        ).order_by('name')
        if self.action == 'list':
            queryset = queryset.filter(is_active=True)
        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return CategoryDetailSerializer
        return CategorySerializer

    def update(self, request, *args, **kwargs):
        # Не переданные поля сохраняют текущее значение
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        try:
            category.delete()
        except ProtectedError:
            return Response(
                {'error': 'Category has products and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"Category {category.name!r} deleted")
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductViewSet(viewsets.ModelViewSet):
    """
    ViewSet для товаров.

    Предоставляет:
        - list: GET /api/products/?category=<id>&page=<n>&page_size=<n>
        - retrieve: GET /api/products/{id}/ - товар с вариантами и изображениями
        - by_category: GET /api/products/by-category/{slug}/
        - create / update / destroy
        - variants: GET|POST /api/products/{id}/variants/
        - images: POST /api/products/{id}/images/

    Покупателю видны только активные товары.
    """
    permission_classes = [AllowAny]
    pagination_class = CatalogPagination
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    PUBLIC_ACTIONS = ('list', 'retrieve', 'by_category')

    def get_queryset(self):
        """
        Использует select_related/prefetch_related для минимизации запросов к БД.
        """
        queryset = (
            Product.objects
            .select_related('category')
            .prefetch_related('variants', 'images')
            .order_by('name', 'id')
        )
        if self.action in self.PUBLIC_ACTIONS:
            queryset = queryset.filter(is_active=True)
        if self.action == 'list':
            category_id = self.request.query_params.get('category')
            if category_id:
                if not category_id.isdigit():
                    return queryset.none()
                queryset = queryset.filter(category_id=int(category_id))
        return queryset

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return ProductWriteSerializer
        if self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductListSerializer

    def _detail_response(self, product, status_code=status.HTTP_200_OK):
        product = self.get_queryset().get(pk=product.pk)
        serializer = ProductDetailSerializer(product, context={'request': self.request})
        return Response(serializer.data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        logger.info(f"Product {product.model_no} created")
        return self._detail_response(product, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        product = self.get_object()
        serializer = ProductWriteSerializer(product, data=request.data, partial=True, context={'request': request})
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        return self._detail_response(product)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        try:
            product.delete()
        except ProtectedError:
            return Response(
                {'error': 'Product is referenced by orders and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"Product {product.model_no} deleted")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='by-category/(?P<category_slug>[^/.]+)')
    def by_category(self, request, category_slug=None):
        """
        Получить товары по slug категории.

        Returns:
            - 200: Список товаров категории (с пагинацией)
            - 404: Категория не найдена
        """
        try:
            category = Category.objects.get(slug=category_slug)
        except Category.DoesNotExist:
            return Response(
                {'error': 'Category not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        queryset = self.get_queryset().filter(category=category)
        page = self.paginate_queryset(queryset)
        serializer = ProductListSerializer(page, many=True, context={'request': request})
        return self.get_paginated_response(serializer.data)

    @action(detail=True, methods=['get', 'post'], url_path='variants')
    def variants(self, request, pk=None):
        """
        Варианты товара. POST добавляет новый вариант (по умолчанию "Size").

        Returns:
            - 201: Вариант создан
            - 400: Ошибка валидации или такой вариант уже есть
        """
        product = self.get_object()
        if request.method == 'GET':
            serializer = ProductVariantSerializer(product.variants.all(), many=True)
            return Response(serializer.data)

        serializer = ProductVariantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exists = ProductVariant.objects.filter(
            product=product,
            variant_name=serializer.validated_data['variant_name'],
            variant_value=serializer.validated_data['variant_value'],
        ).exists()
        if exists:
            return Response(
                {'error': 'Variant already exists for this product'},
                status=status.HTTP_400_BAD_REQUEST
            )
        serializer.save(product=product)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='images')
    def images(self, request, pk=None):
        """Добавить изображение в галерею товара."""
        product = self.get_object()
        serializer = ProductImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(product=product)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class BulkUploadViewSet(viewsets.ViewSet):
    """
    Массовая загрузка прайса в матричном формате.

    Предоставляет:
        - upload_matrix: POST /api/bulk-upload/upload-matrix/ (multipart: file, category, layout)
        - template_matrix: GET /api/bulk-upload/template-matrix/
    """
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @action(detail=False, methods=['post'], url_path='upload-matrix')
    def upload_matrix(self, request):
        """
        Импорт Excel файла.

        Returns:
            - 200: Итоги импорта (ошибки по отдельным товарам в summary.errors)
            - 400: Нет файла, файл слишком большой, не тот формат, неизвестная категория
            - 500: Непредвиденная ошибка
        """
        uploaded = request.FILES.get('file')
        if not uploaded:
            return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)

        max_size = settings.BULK_IMPORT_MAX_UPLOAD_SIZE
        if uploaded.size > max_size:
            return Response(
                {'error': f'File size exceeds {max_size // (1024 * 1024)} MB limit'},
                status=status.HTTP_400_BAD_REQUEST
            )

        allowed = settings.BULK_IMPORT_ALLOWED_EXTENSIONS
        extension = os.path.splitext(uploaded.name or '')[1].lower()
        if extension not in allowed:
            return Response(
                {'error': f"Only Excel files ({', '.join(allowed)}) are supported"},
                status=status.HTTP_400_BAD_REQUEST
            )

        category_name = request.data.get('category') or None
        layout = request.data.get('layout') or None
        logger.info(
            f"Matrix upload {uploaded.name!r} ({uploaded.size} bytes), category={category_name!r}, layout={layout!r}"
        )

        try:
            summary = import_matrix_workbook(uploaded, category_name=category_name, layout=layout)
        except MatrixImportError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception as exc:
            logger.exception("Bulk matrix upload failed")
            return Response(
                {'error': 'Failed to process bulk upload', 'detail': str(exc)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({'message': SUMMARY_MESSAGE, 'summary': summary.as_dict()})

    @action(detail=False, methods=['get'], url_path='template-matrix')
    def template_matrix(self, request):
        """Скачать шаблон .xlsx с заголовками и примером заполнения."""
        try:
            content = build_matrix_template(layout=request.query_params.get('layout'))
        except MatrixImportError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{TEMPLATE_FILENAME}"'
        return response


class CartViewSet(viewsets.ViewSet):
    """
    ViewSet для операций с корзиной.

    Предоставляет:
        - list: GET /api/cart/ - содержимое корзины
        - add: POST /api/cart/add/ - добавить вариант товара
        - remove: POST /api/cart/remove/ - удалить вариант
        - clear: POST /api/cart/clear/ - очистить корзину
        - checkout: POST /api/cart/checkout/ - оформить заказ

    Корзина хранится в сессии; цены всегда берутся из БД.
    """
    permission_classes = [AllowAny]

    def list(self, request):
        cart = get_cart_from_session(request)
        lines, total = build_cart_lines(cart)
        return Response({
            'items': lines,
            'cart_count': sum(line['quantity'] for line in lines),
            'total': str(total),
        })

    @action(detail=False, methods=['post'])
    def add(self, request):
        """
        Добавить вариант товара в корзину.

        Request Body:
            - variant_id: ID варианта (required)
            - quantity: Количество (default 1)
            - customizations: {"engraving": "..."} (optional)
        """
        serializer = CartItemSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        validated_data = serializer.validated_data
        variant_id = validated_data['variant_id']
        variant = (
            ProductVariant.objects
            .select_related('product')
            .filter(pk=variant_id, product__is_active=True)
            .first()
        )
        if variant is None:
            return Response(
                {'error': 'Product variant not found or unavailable'},
                status=status.HTTP_404_NOT_FOUND
            )

        cart = get_cart_from_session(request)
        cart_key = str(variant_id)
        if cart_key in cart:
            cart[cart_key]['quantity'] += validated_data['quantity']
        else:
            cart[cart_key] = {
                'variant_id': variant_id,
                'quantity': validated_data['quantity'],
                'customizations': {},
            }
        if validated_data.get('customizations'):
            cart[cart_key]['customizations'] = validated_data['customizations']
        save_cart_to_session(request, cart)

        return Response({
            'success': True,
            'message': f'"{variant.product.name}" added to cart',
            'cart_count': cart_count(cart),
        })

    @action(detail=False, methods=['post'])
    def remove(self, request):
        variant_id = request.data.get('variant_id')
        if not variant_id:
            return Response({'error': 'variant_id is required'}, status=status.HTTP_400_BAD_REQUEST)

        cart = get_cart_from_session(request)
        cart_key = str(variant_id)
        if cart_key not in cart:
            return Response({'error': 'Item not found in cart'}, status=status.HTTP_404_NOT_FOUND)

        del cart[cart_key]
        save_cart_to_session(request, cart)
        return Response({
            'success': True,
            'message': 'Item removed from cart',
            'cart_count': cart_count(cart),
        })

    @action(detail=False, methods=['post'])
    def clear(self, request):
        save_cart_to_session(request, {})
        return Response({'success': True, 'message': 'Cart cleared', 'cart_count': 0})

    @action(detail=False, methods=['post'])
    def checkout(self, request):
        """
        Оформить заказ из содержимого корзины и очистить её.

        Returns:
            - 201: Заказ создан
            - 400: Пустая корзина или ошибка валидации
        """
        serializer = CheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        lines, _ = build_cart_lines(get_cart_from_session(request))
        if not lines:
            return Response({'error': 'Cart is empty'}, status=status.HTTP_400_BAD_REQUEST)

        customer = serializer.validated_data
        order_input = OrderInput(
            customer_name=customer['customer_name'],
            customer_email=customer['customer_email'],
            customer_phone=customer['customer_phone'],
            delivery_address=customer['delivery_address'],
            discount_code=customer.get('discount_code', ''),
            notes=customer.get('notes', ''),
            items=[
                OrderItemInput(
                    product_id=line['product_id'],
                    variant_id=line['variant_id'],
                    quantity=line['quantity'],
                    customizations=line['customizations'],
                )
                for line in lines
            ],
        )
        try:
            order = create_order(order_input)
        except OrderError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        save_cart_to_session(request, {})
        return Response({
            'order_id': order.pk,
            'order_number': order.order_number,
            'amount': str(order.total_amount),
            'message': 'Order created successfully. Proceed to payment.',
        }, status=status.HTTP_201_CREATED)
