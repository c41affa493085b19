"""
Cell-level parsing for the price-list matrix.

Every helper takes the raw openpyxl cell value (or text derived from it) and
never raises on bad input: malformed numbers fall back to zero or to the
default GST rate, exactly as the shop staff expect when a price list is
filled in by hand.
"""
from __future__ import annotations

import datetime
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from django.conf import settings
from django.utils.text import slugify

MODEL_NO_RE = re.compile(r"^[A-Za-z0-9\-_\s]+$")
CATEGORY_CODE_RE = re.compile(r"^([A-Z]+)")
GST_RE = re.compile(r"GST\s*[@:\-]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
CURRENCY_RE = re.compile(r"(?:\brs\b\.?|\binr\b|₹)", re.IGNORECASE)
NON_NUMERIC_RE = re.compile(r"[^\d.]")

TWO_PLACES = Decimal("0.01")


def cell_text(value: Any) -> str:
    """
    Render a cell value the way it looks in the sheet.

    Whole floats lose their trailing ``.0`` (Excel stores ``29`` as ``29.0``).
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal(1)))
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return str(value).strip()


def is_valid_model_no(model_no: str) -> bool:
    return bool(model_no) and bool(MODEL_NO_RE.match(model_no))


def parse_quantity(text: str) -> int:
    """Whole number of units; anything unparsable or negative counts as 0."""
    text = (text or "").strip().replace(",", "")
    if not text:
        return 0
    try:
        quantity = int(text)
    except ValueError:
        try:
            number = Decimal(text)
        except InvalidOperation:
            return 0
        if not number.is_finite() or number != number.to_integral_value():
            return 0
        quantity = int(number)
    return max(quantity, 0)


def parse_price(text: str) -> Decimal:
    """
    Price in rupees rounded to paise.

    Currency markers and thousands separators are dropped before the
    remaining characters are filtered: ``"Rs. 1,500"`` -> ``1500.00``.
    """
    text = CURRENCY_RE.sub("", text or "")
    cleaned = NON_NUMERIC_RE.sub("", text)
    if not cleaned or cleaned.count(".") > 1:
        return Decimal("0.00")
    if cleaned.startswith("."):
        cleaned = "0" + cleaned
    try:
        price = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0.00")
    return price.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def default_gst() -> Decimal:
    return Decimal(str(getattr(settings, "DEFAULT_GST_PERCENT", "18.00"))).quantize(TWO_PLACES)


def parse_gst(text: str) -> Decimal:
    """First number after ``GST`` in the HSN/GST cell, e.g. ``"HSN 9403 GST 12%"`` -> 12."""
    match = GST_RE.search(text or "")
    if not match:
        return default_gst()
    return Decimal(match.group(1)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def category_code(model_no: str) -> str:
    """Leading upper-case letters of a model number: ``NWD-1`` -> ``NWD``."""
    match = CATEGORY_CODE_RE.match(model_no or "")
    if match:
        return match.group(1)
    return (model_no or "").strip()


def product_slug_base(model_no: str, size: str) -> str:
    """Slug candidate for a new product; inches mark becomes ``in`` (``10"`` -> ``10in``)."""
    size_part = (size or "").replace('"', "in")
    return slugify(f"{model_no}-{size_part}") or slugify(model_no) or "product"


def normalize_category_name(name: str) -> str:
    """Category names arrive as form values where spaces may be sent as underscores."""
    return " ".join((name or "").replace("_", " ").split())
