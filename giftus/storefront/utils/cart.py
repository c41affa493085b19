from decimal import Decimal

CART_SESSION_KEY = 'cart'


def get_cart_from_session(request):
    """
    Извлекает корзину из сессии.

    Корзина: {"<variant_id>": {"variant_id": int, "quantity": int, "customizations": {...}}}
    """
    return request.session.get(CART_SESSION_KEY, {})


def save_cart_to_session(request, cart):
    """
    Сохраняет корзину в сессию.
    """
    request.session[CART_SESSION_KEY] = cart
    request.session.modified = True


def cart_count(cart):
    return sum(int(item.get('quantity', 0)) for item in cart.values())


def build_cart_lines(cart):
    """
    Строки корзины с актуальными ценами.

    ВАЖНО: Цена ВСЕГДА берется из ProductVariant.price, а НЕ из сессии!
    Варианты, которых больше нет в каталоге (или товар выключен), пропускаются.

    Returns:
        tuple: (список строк, общая сумма без GST и доставки)
    """
    from ..models import ProductVariant

    if not cart:
        return [], Decimal('0.00')

    ids = [item['variant_id'] for item in cart.values()]
    variants = ProductVariant.objects.select_related('product').in_bulk(ids)

    lines = []
    total = Decimal('0.00')
    for item in cart.values():
        variant = variants.get(item['variant_id'])
        if variant is None or not variant.product.is_active:
            continue
        qty = int(item.get('quantity', 0))
        line_total = variant.price * qty
        total += line_total
        lines.append({
            'variant_id': variant.pk,
            'product_id': variant.product_id,
            'model_no': variant.product.model_no,
            'name': variant.product.name,
            'variant_name': variant.variant_name,
            'variant_value': variant.variant_value,
            'quantity': qty,
            'price': str(variant.price),
            'line_total': str(line_total),
            'customizations': item.get('customizations') or {},
        })
    return lines, total
