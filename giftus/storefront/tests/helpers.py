"""
Builders for in-memory matrix workbooks used across the import tests.
"""
from __future__ import annotations

import zipfile
from io import BytesIO
from typing import Iterable, Sequence, Tuple

from openpyxl import Workbook
from PIL import Image

from storefront.services.matrix_import.layout import (
    HSN_GST_OFFSET,
    PRICE_OFFSET,
    QUANTITY_OFFSET,
    SIZE_OFFSET,
    STACKED,
    MatrixLayout,
)

PNG_PIXEL = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\nIDATx\x9cc\x00\x01"
    b"\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def jpeg_bytes(color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (2, 2), color).save(buffer, format="JPEG")
    return buffer.getvalue()


def block(row, slot, model_no, size='10"', quantity=5, price="Rs. 1,500", hsn_gst="HSN 9403 GST 18%", image_ref=None):
    return {
        "row": row,
        "slot": slot,
        "model_no": model_no,
        "size": size,
        "quantity": quantity,
        "price": price,
        "hsn_gst": hsn_gst,
        "image_ref": image_ref,
    }


def build_matrix_workbook(
    blocks: Sequence[dict],
    *,
    layout: MatrixLayout = STACKED,
    images: Iterable[Tuple[str, bytes]] = (),
    header: bool = True,
) -> bytes:
    """
    Workbook bytes with the given product blocks; ``images`` are appended to
    the ZIP container under ``xl/media/`` the way Excel stores pasted pictures.
    """
    workbook = Workbook()
    worksheet = workbook.active
    if header:
        for start_col in layout.start_columns:
            worksheet.cell(row=1, column=start_col, value="Image")
            worksheet.cell(row=1, column=start_col + 1, value="Model No")

    for item in blocks:
        row = item["row"]
        start_col = layout.start_columns[item["slot"] - 1]
        worksheet.cell(*layout.model_no_cell(row, start_col), value=item["model_no"])
        worksheet.cell(*layout.detail_cell(row, start_col, SIZE_OFFSET), value=item["size"])
        worksheet.cell(*layout.detail_cell(row, start_col, QUANTITY_OFFSET), value=item["quantity"])
        worksheet.cell(*layout.detail_cell(row, start_col, PRICE_OFFSET), value=item["price"])
        worksheet.cell(*layout.detail_cell(row, start_col, HSN_GST_OFFSET), value=item["hsn_gst"])
        if item.get("image_ref"):
            worksheet.cell(*layout.image_cell(row, start_col), value=item["image_ref"])

    buffer = BytesIO()
    workbook.save(buffer)
    images = list(images)
    if images:
        with zipfile.ZipFile(buffer, "a") as archive:
            for name, content in images:
                archive.writestr(f"xl/media/{name}", content)
    return buffer.getvalue()


def make_category(name="Trophies", slug=None, **kwargs):
    from storefront.models import Category

    return Category.objects.create(name=name, slug=slug or name.lower().replace(" ", "-"), **kwargs)


def make_product(category, model_no="NWD-1", price="100.00", gst_percent="18.00", size='10"', **kwargs):
    """Product with a single Size variant."""
    from decimal import Decimal

    from storefront.models import Product, ProductVariant

    kwargs.setdefault("name", f"{model_no} - {size}")
    kwargs.setdefault("slug", model_no.lower().replace(" ", "-"))
    product = Product.objects.create(
        category=category,
        model_no=model_no,
        gst_percent=Decimal(gst_percent),
        **kwargs,
    )
    ProductVariant.objects.create(
        product=product,
        variant_name=ProductVariant.DEFAULT_NAME,
        variant_value=size,
        price=Decimal(price),
        stock_qty=10,
    )
    return product
