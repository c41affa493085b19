from django.utils.text import slugify


def unique_slugify(model, base_slug, *, exclude_pk=None, max_length=None):
    """
    Створює унікальний slug на основі base_slug для заданої моделі.

    Якщо slug вже існує, додає числовий суфікс (-2, -3, і т.д.)
    до тих пір, поки не знайде унікальне значення.

    Args:
        model: Django модель (клас, не інстанс)
        base_slug (str): Базовий slug для генерації
        exclude_pk: pk запису, який не враховується (при оновленні)
        max_length: обмеження довжини поля slug

    Example:
        >>> unique_slugify(Product, 'nwd-1-10in')
        'nwd-1-10in'
        >>> unique_slugify(Product, 'nwd-1-10in')  # якщо вже існує
        'nwd-1-10in-2'
    """
    slug = slugify(base_slug or '') or 'item'
    if max_length is None:
        max_length = model._meta.get_field('slug').max_length
    slug = slug[:max_length].strip('-') or 'item'

    queryset = model.objects.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    uniq = slug
    i = 2
    while queryset.filter(slug=uniq).exists():
        suffix = f"-{i}"
        uniq = f"{slug[:max_length - len(suffix)].rstrip('-')}{suffix}"
        i += 1
    return uniq
