"""
Bulk import of the matrix price list into the catalog.

Usage:
    summary = import_matrix_workbook(uploaded_file, category_name="Trophies")

Every product block is written inside its own savepoint, so a broken block
is rolled back and reported while the rest of the sheet is still imported.
Re-importing the same sheet updates products and variants in place.
"""
from __future__ import annotations

import logging
import zipfile
from decimal import Decimal
from typing import BinaryIO, Optional, Union

import requests
from django.core.files.base import ContentFile
from django.db import transaction
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from storefront.models import Category, Product, ProductVariant
from storefront.utils import unique_slugify

from .exceptions import MatrixImportError, MatrixRowError
from .layout import (
    HSN_GST_OFFSET,
    LINKS_OFFSET,
    PRICE_OFFSET,
    QUANTITY_OFFSET,
    SIZE_OFFSET,
    ImportSummary,
    MatrixLayout,
    MatrixProductData,
    get_layout,
)
from .media import EmbeddedMediaQueue, ImageBlob, download_image, is_image_url
from .parsing import (
    category_code,
    cell_text,
    is_valid_model_no,
    normalize_category_name,
    parse_gst,
    parse_price,
    parse_quantity,
    product_slug_base,
)

logger = logging.getLogger(__name__)

SUMMARY_MESSAGE = "Bulk matrix upload completed"

# ProductVariant.price is DECIMAL(10, 2)
MAX_PRICE_INTEGER_DIGITS = 8
MAX_GST_PERCENT = Decimal("100")


def find_selected_category(name: str) -> Category:
    """
    Category picked in the upload form, matched by name ignoring case.

    Underscores are accepted in place of spaces (``Corporate_Gifts``).
    """
    raw = (name or "").strip()
    candidates = [normalize_category_name(raw), raw]
    for candidate in candidates:
        if not candidate:
            continue
        category = Category.objects.filter(name__iexact=candidate).first()
        if category is not None:
            return category
    raise MatrixImportError(f"Invalid category: {name}")


def get_or_create_category_for_code(code: str) -> Category:
    category = Category.objects.filter(name__iexact=code).first()
    if category is not None:
        return category
    category = Category.objects.create(
        name=code,
        slug=unique_slugify(Category, code),
        is_active=True,
    )
    logger.info(f"Created category {category.name!r} from model number prefix")
    return category


class MatrixImporter:
    """
    Reads one workbook and upserts Category / Product / ProductVariant rows.

    Args:
        source: path or seekable binary file of an .xlsx workbook.
        category_name: optional category for every product of the upload.
        layout: ``"stacked"`` (default) or ``"inline"``.
    """

    def __init__(
        self,
        source: Union[str, BinaryIO],
        *,
        category_name: Optional[str] = None,
        layout: Union[str, MatrixLayout, None] = None,
    ):
        self.source = source
        self.category_name = (category_name or "").strip()
        self.layout = layout if isinstance(layout, MatrixLayout) else get_layout(layout)
        self.summary = ImportSummary()
        self.media = EmbeddedMediaQueue(source)
        self._selected_category: Optional[Category] = None

    # ------------------------------------------------------------------ reading

    def _open_worksheet(self):
        if hasattr(self.source, "seek"):
            self.source.seek(0)
        try:
            workbook = load_workbook(self.source, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
            raise MatrixImportError(f"Unable to read Excel file: {exc}") from exc

        if not workbook.worksheets:
            raise MatrixImportError("Excel file contains no worksheets")
        worksheet = workbook.worksheets[0]
        logger.info(
            f"Worksheet {worksheet.title!r}: {worksheet.max_row} rows, {worksheet.max_column} columns"
        )
        if worksheet.max_row < 2:
            raise MatrixImportError("Excel file is empty")
        return worksheet

    def _text(self, worksheet, cell) -> str:
        row, column = cell
        return cell_text(worksheet.cell(row=row, column=column).value)

    def read_block(self, worksheet, row: int, start_col: int, slot: int) -> MatrixProductData:
        layout = self.layout
        model_no = self._text(worksheet, layout.model_no_cell(row, start_col))
        if not model_no:
            raise MatrixRowError("ModelNo is required")
        if not is_valid_model_no(model_no):
            raise MatrixRowError(
                f"Invalid product SKU format: '{model_no}'. Use alphanumeric characters, "
                f"hyphens, underscores, and spaces only (e.g., NWD-1)."
            )

        size = self._text(worksheet, layout.detail_cell(row, start_col, SIZE_OFFSET))
        if not size:
            raise MatrixRowError("Size is required")

        price_text = self._text(worksheet, layout.detail_cell(row, start_col, PRICE_OFFSET))
        price = parse_price(price_text)
        if len(str(int(price))) > MAX_PRICE_INTEGER_DIGITS:
            raise MatrixRowError(f"Price out of range: '{price_text}'")

        hsn_gst = self._text(worksheet, layout.detail_cell(row, start_col, HSN_GST_OFFSET))
        gst_percent = parse_gst(hsn_gst)
        if not Decimal("0") <= gst_percent <= MAX_GST_PERCENT:
            raise MatrixRowError(f"GST out of range (0-100): '{hsn_gst}'")

        data = MatrixProductData(
            row=row,
            slot=slot,
            model_no=model_no,
            size=size,
            quantity=parse_quantity(self._text(worksheet, layout.detail_cell(row, start_col, QUANTITY_OFFSET))),
            price=price,
            gst_percent=gst_percent,
            image_ref=self._text(worksheet, layout.image_cell(row, start_col)),
            links=self._text(worksheet, layout.detail_cell(row, start_col, LINKS_OFFSET)),
            hsn_gst=hsn_gst,
        )
        logger.debug(f"Parsed block row={row} slot={slot}: {data}")
        return data

    # ---------------------------------------------------------------- writing

    def _category_for(self, data: MatrixProductData) -> Category:
        if self._selected_category is not None:
            return self._selected_category
        return get_or_create_category_for_code(category_code(data.model_no))

    def upsert_product(self, data: MatrixProductData) -> tuple[Product, bool]:
        category = self._category_for(data)
        description = f"Size: {data.size}"
        product = Product.objects.select_for_update().filter(model_no=data.model_no).first()
        if product is not None:
            product.short_description = description
            product.gst_percent = data.gst_percent
            product.quantity = data.quantity
            product.category = category
            product.save(update_fields=["short_description", "gst_percent", "quantity", "category"])
            return product, False

        product = Product.objects.create(
            category=category,
            model_no=data.model_no,
            name=f"{data.model_no} - {data.size}",
            slug=unique_slugify(Product, product_slug_base(data.model_no, data.size)),
            short_description=description,
            gst_percent=data.gst_percent,
            quantity=data.quantity,
            is_customizable=False,
            is_active=True,
        )
        return product, True

    def upsert_variant(self, product: Product, data: MatrixProductData) -> ProductVariant:
        variant, _ = ProductVariant.objects.update_or_create(
            product=product,
            variant_name=ProductVariant.DEFAULT_NAME,
            variant_value=data.size,
            defaults={"price": data.price, "stock_qty": data.quantity},
        )
        return variant

    def _next_image(self, data: MatrixProductData) -> Optional[ImageBlob]:
        if is_image_url(data.image_ref):
            return download_image(data.image_ref)
        return self.media.next()

    def attach_image(self, product: Product, data: MatrixProductData) -> None:
        """
        Store the block's picture as ``products/<model>_base.<ext>``; failures only warn.

        A previous picture under another extension is removed only after the
        transaction commits, so a rolled-back block keeps its old file.
        """
        try:
            blob = self._next_image(data)
            if blob is None:
                return
            file_name = f"{product.model_no.replace(' ', '-')}_base.{blob.extension}"
            storage = product.base_image.storage
            target = f"{product.base_image.field.upload_to}{file_name}"
            previous = product.base_image.name if product.base_image else ""
            if storage.exists(target):
                storage.delete(target)
            product.base_image.save(file_name, ContentFile(blob.content), save=False)
            product.save(update_fields=["base_image"])
            if previous and previous != product.base_image.name:
                transaction.on_commit(lambda: storage.delete(previous))
        except (requests.RequestException, OSError, ValueError) as exc:
            logger.warning(
                f"Failed to attach image for product {data.model_no} - continuing with upload: {exc}"
            )

    def process_block(self, data: MatrixProductData) -> bool:
        """Write one parsed block; returns True when a new product was created."""
        product, created = self.upsert_product(data)
        self.upsert_variant(product, data)
        self.attach_image(product, data)
        return created

    # ------------------------------------------------------------------- flow

    def _import_slot(self, worksheet, row: int, start_col: int, slot: int, model_no: str) -> None:
        summary = self.summary
        try:
            with transaction.atomic():
                data = self.read_block(worksheet, row, start_col, slot)
                created = self.process_block(data)
        except MatrixRowError as exc:
            summary.failed_rows += 1
            summary.errors.append(f"Product {slot} (Row {row}, ModelNo {model_no}): {exc}")
            logger.error(f"Error processing product {slot} at row {row}: {exc}")
            return
        except Exception as exc:
            summary.failed_rows += 1
            summary.errors.append(f"Product {slot} (Row {row}, ModelNo {model_no}): {exc}")
            logger.error(f"Error processing product {slot} at row {row}", exc_info=True)
            return

        summary.successful_rows += 1
        if created:
            summary.created_products += 1
        else:
            summary.updated_products += 1

    def run(self) -> ImportSummary:
        if self.category_name:
            self._selected_category = find_selected_category(self.category_name)

        worksheet = self._open_worksheet()
        layout = self.layout
        max_row = worksheet.max_row
        row = layout.first_row

        while row <= max_row:
            slots = []
            for index, start_col in enumerate(layout.start_columns, start=1):
                model_no = self._text(worksheet, layout.model_no_cell(row, start_col))
                if model_no:
                    slots.append((index, start_col, model_no))

            if not slots:
                row += 1
                continue

            for slot, start_col, model_no in slots:
                self._import_slot(worksheet, row, start_col, slot, model_no)

            self.summary.total_rows += len(slots)
            row += layout.block_height

        logger.info(
            f"Matrix import finished: {self.summary.successful_rows}/{self.summary.total_rows} products, "
            f"{self.summary.failed_rows} failed"
        )
        return self.summary


def import_matrix_workbook(
    source: Union[str, BinaryIO],
    *,
    category_name: Optional[str] = None,
    layout: Optional[str] = None,
) -> ImportSummary:
    """Run a matrix import and return its summary."""
    return MatrixImporter(source, category_name=category_name, layout=layout).run()
