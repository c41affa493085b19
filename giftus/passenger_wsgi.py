import os
import sys

sys.path.insert(0, os.path.dirname(__file__))

# На хостинге всегда поднимаем production настройки
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "giftus.production_settings")

from django.core.wsgi import get_wsgi_application
application = get_wsgi_application()
