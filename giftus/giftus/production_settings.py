"""
Production settings for Giftus project.

Запуск: DJANGO_SETTINGS_MODULE=giftus.production_settings (см. passenger_wsgi.py).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env.production подгружаем ДО базовых настроек, чтобы они увидели переменные
_prod_env = Path(__file__).resolve().parent.parent / '.env.production'
if not os.environ.get('DJANGO_ENV_FILE') and _prod_env.exists():
    load_dotenv(_prod_env)

from .settings import *  # noqa: E402,F401,F403
from .settings import _env_bool  # noqa: E402

import pymysql  # noqa: E402

pymysql.install_as_MySQLdb()

DEBUG = False

if not os.environ.get('ALLOWED_HOSTS'):
    ALLOWED_HOSTS = ['giftus.in', 'www.giftus.in']

CSRF_TRUSTED_ORIGINS = [
    origin.strip() for origin in os.environ.get('CSRF_TRUSTED_ORIGINS', '').split(',') if origin.strip()
] or [f"https://{host}" for host in ALLOWED_HOSTS if host not in ('*', 'localhost', '127.0.0.1')]


def _database_from_env():
    """
    MySQL (через PyMySQL) или PostgreSQL по DB_ENGINE.

    Без DB_NAME/DB_USER остаётся SQLite из базовых настроек.
    """
    engine = os.environ.get('DB_ENGINE', 'mysql').lower()
    common = {
        'NAME': os.environ['DB_NAME'],
        'USER': os.environ['DB_USER'],
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'CONN_MAX_AGE': int(os.environ.get('DB_CONN_MAX_AGE', '60')),
    }
    if engine.startswith('postgres'):
        return {
            **common,
            'ENGINE': 'django.db.backends.postgresql',
            'PORT': os.environ.get('DB_PORT', '5432'),
            'OPTIONS': {'sslmode': os.environ.get('DB_SSLMODE', 'require')},
        }
    return {
        **common,
        'ENGINE': 'django.db.backends.mysql',
        'PORT': os.environ.get('DB_PORT', '3306'),
        # utf8mb4 нужен для ₹ и кириллицы в прайсах
        'OPTIONS': {
            'charset': 'utf8mb4',
            'init_command': "SET NAMES 'utf8mb4' COLLATE 'utf8mb4_unicode_ci'",
            'sql_mode': os.environ.get('DB_SQL_MODE', 'STRICT_TRANS_TABLES,NO_ENGINE_SUBSTITUTION'),
        },
    }


if os.environ.get('DB_NAME') and os.environ.get('DB_USER'):
    DATABASES = {'default': _database_from_env()}

# Статика через WhiteNoise, картинки товаров из импорта лежат в MEDIA_ROOT
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}
WHITENOISE_MAX_AGE = int(os.environ.get('WHITENOISE_MAX_AGE', str(60 * 60 * 24 * 30)))
FILE_UPLOAD_PERMISSIONS = 0o644

REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = ['rest_framework.renderers.JSONRenderer']

# Безопасность
SECURE_SSL_REDIRECT = _env_bool('SECURE_SSL_REDIRECT', True)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'
SECURE_HSTS_SECONDS = int(os.environ.get('SECURE_HSTS_SECONDS', '31536000'))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# Логи только в файл: консоль хостинга никто не читает
for _logger in LOGGING['loggers'].values():
    _logger['handlers'] = ['file']
    _logger['level'] = 'INFO'
