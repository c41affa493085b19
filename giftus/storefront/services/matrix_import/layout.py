"""
Geometry of the price-list matrix and the value objects passed between stages.

Each row-block holds two products side by side: the left one starts at
column B, the right one at column J. Within a block, column offsets from the
start column are fixed (model number +1, size +2, quantity +3, price +4,
links +5, HSN/GST +6); only the row carrying the details differs per layout.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Tuple

from .exceptions import MatrixImportError

MODEL_NO_OFFSET = 1
SIZE_OFFSET = 2
QUANTITY_OFFSET = 3
PRICE_OFFSET = 4
LINKS_OFFSET = 5
HSN_GST_OFFSET = 6


@dataclass(frozen=True)
class MatrixLayout:
    """
    Row geometry of a product block.

    Attributes:
        name: Layout key used by the API and the management command.
        detail_row_offset: Rows between the model-number row and the detail row.
        image_row_offset: Rows between the model-number row and the image cell.
        block_height: Rows consumed by a non-empty block (separator included).
        first_row: First data row (row 1 is the header).
        start_columns: Start column of each product slot, left to right.
    """

    name: str
    detail_row_offset: int
    image_row_offset: int
    block_height: int
    first_row: int = 2
    start_columns: Tuple[int, ...] = (2, 10)

    def model_no_cell(self, row: int, start_col: int) -> Tuple[int, int]:
        return row, start_col + MODEL_NO_OFFSET

    def detail_cell(self, row: int, start_col: int, offset: int) -> Tuple[int, int]:
        return row + self.detail_row_offset, start_col + offset

    def image_cell(self, row: int, start_col: int) -> Tuple[int, int]:
        return row + self.image_row_offset, start_col


# Current price list: model number, then a row with image and details, then a blank row.
STACKED = MatrixLayout(name="stacked", detail_row_offset=1, image_row_offset=1, block_height=3)
# Older price list: details next to the model number, image below, 4-row blocks.
INLINE = MatrixLayout(name="inline", detail_row_offset=0, image_row_offset=1, block_height=4)

LAYOUTS: Dict[str, MatrixLayout] = {
    STACKED.name: STACKED,
    INLINE.name: INLINE,
}
DEFAULT_LAYOUT = STACKED.name


def get_layout(name: str | None) -> MatrixLayout:
    """Resolve a layout by name; empty name means the default layout."""
    key = (name or DEFAULT_LAYOUT).strip().lower()
    try:
        return LAYOUTS[key]
    except KeyError:
        raise MatrixImportError(
            f"Unknown layout '{name}'. Expected one of: {', '.join(sorted(LAYOUTS))}"
        ) from None


@dataclass
class MatrixProductData:
    """One product block as read from the sheet, before any database work."""

    row: int
    slot: int
    model_no: str
    size: str
    quantity: int
    price: Decimal
    gst_percent: Decimal
    image_ref: str = ""
    links: str = ""
    hsn_gst: str = ""


@dataclass
class ImportSummary:
    total_rows: int = 0
    successful_rows: int = 0
    failed_rows: int = 0
    created_products: int = 0
    updated_products: int = 0
    errors: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "successful_rows": self.successful_rows,
            "failed_rows": self.failed_rows,
            "created_products": self.created_products,
            "updated_products": self.updated_products,
            "errors": list(self.errors),
        }
