from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin

from . import views

urlpatterns = [
    path("", views.welcome, name="welcome"),
    path("admin/", admin.site.urls),

    # REST API
    path("api/health/", views.health, name="health"),
    path("api/", include("storefront.api_urls")),
]

# Медиа-файлы (изображения товаров из импорта)
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
