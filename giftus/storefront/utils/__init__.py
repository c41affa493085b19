"""
Storefront utilities package.
"""

from .cart import (
    build_cart_lines,
    cart_count,
    get_cart_from_session,
    save_cart_to_session,
)
from .slugs import unique_slugify

__all__ = [
    'build_cart_lines',
    'cart_count',
    'get_cart_from_session',
    'save_cart_to_session',
    'unique_slugify',
]
