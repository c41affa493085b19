"""
Django REST Framework API URLs with Router.

Автоматически генерирует URL patterns для ViewSets.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from orders.viewsets import OrderViewSet

from .viewsets import (
    BulkUploadViewSet,
    CartViewSet,
    CategoryViewSet,
    ProductViewSet,
)


# Создаем Router
router = DefaultRouter()

# Регистрируем ViewSets
router.register(r'categories', CategoryViewSet, basename='api-category')
router.register(r'products', ProductViewSet, basename='api-product')
router.register(r'bulk-upload', BulkUploadViewSet, basename='api-bulk-upload')
router.register(r'cart', CartViewSet, basename='api-cart')
router.register(r'orders', OrderViewSet, basename='api-order')

# URL patterns
urlpatterns = [
    path('', include(router.urls)),
]

# Автоматически созданные URLs:
# GET    /api/categories/                         - Активные категории
# GET    /api/categories/{id}/                    - Категория с товарами
# GET    /api/products/                           - Список товаров (page, page_size, category)
# GET    /api/products/{id}/                      - Детали товара
# GET    /api/products/by-category/{slug}/        - Товары по категории
# POST   /api/products/{id}/variants/             - Добавить вариант
# POST   /api/products/{id}/images/               - Добавить изображение
# POST   /api/bulk-upload/upload-matrix/          - Импорт прайса
# GET    /api/bulk-upload/template-matrix/        - Шаблон прайса
# GET    /api/cart/                               - Содержимое корзины
# POST   /api/cart/add/ | remove/ | clear/ | checkout/
# POST   /api/orders/                             - Создать заказ
# GET    /api/orders/{id}/                        - Детали заказа
# GET    /api/orders/customer/{email}/            - Заказы клиента
# POST   /api/orders/{id}/update-payment/ | confirm-payment/ | cancel/ | status/
