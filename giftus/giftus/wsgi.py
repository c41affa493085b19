"""
WSGI config for Giftus project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'giftus.settings')

application = get_wsgi_application()
