"""
Blank price-list template for the matrix import.
"""
from __future__ import annotations

from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .layout import (
    HSN_GST_OFFSET,
    LINKS_OFFSET,
    MODEL_NO_OFFSET,
    PRICE_OFFSET,
    QUANTITY_OFFSET,
    SIZE_OFFSET,
    MatrixLayout,
    get_layout,
)

TEMPLATE_FILENAME = "matrix_upload_template.xlsx"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADERS = {
    0: "Image",
    MODEL_NO_OFFSET: "Model No",
    SIZE_OFFSET: "Size",
    QUANTITY_OFFSET: "Quantity",
    PRICE_OFFSET: "Price",
    LINKS_OFFSET: "Links",
    HSN_GST_OFFSET: "HSN / GST",
}

EXAMPLES = (
    ("NWD-1", '10"', 25, "Rs. 1,500", "", "HSN 9403 GST 18%"),
    ("TPHY-101", "Large", 12, "2450", "", "HSN 8306 GST 12%"),
)


def build_matrix_template(layout: Optional[str] = None) -> bytes:
    """Workbook with the header row and one example block per product slot."""
    matrix: MatrixLayout = get_layout(layout)
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Products"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill("solid", fgColor="1F4E78")

    for start_col in matrix.start_columns:
        for offset, title in HEADERS.items():
            cell = worksheet.cell(row=1, column=start_col + offset, value=title)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            worksheet.column_dimensions[get_column_letter(start_col + offset)].width = 16

    row = matrix.first_row
    for start_col, (model_no, size, quantity, price, links, hsn_gst) in zip(matrix.start_columns, EXAMPLES):
        worksheet.cell(*matrix.model_no_cell(row, start_col), value=model_no)
        worksheet.cell(*matrix.detail_cell(row, start_col, SIZE_OFFSET), value=size)
        worksheet.cell(*matrix.detail_cell(row, start_col, QUANTITY_OFFSET), value=quantity)
        worksheet.cell(*matrix.detail_cell(row, start_col, PRICE_OFFSET), value=price)
        worksheet.cell(*matrix.detail_cell(row, start_col, LINKS_OFFSET), value=links or None)
        worksheet.cell(*matrix.detail_cell(row, start_col, HSN_GST_OFFSET), value=hsn_gst)

    notes_row = row + matrix.block_height + 1
    worksheet.cell(
        row=notes_row,
        column=2,
        value="Paste the product picture into the Image cell. Leave one empty row between product blocks.",
    ).font = Font(italic=True, color="808080")

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
