"""
Bulk import of the two-products-per-block price list (the "matrix").
"""

from .exceptions import MatrixImportError, MatrixRowError
from .importer import (
    SUMMARY_MESSAGE,
    MatrixImporter,
    find_selected_category,
    import_matrix_workbook,
)
from .layout import (
    DEFAULT_LAYOUT,
    INLINE,
    LAYOUTS,
    STACKED,
    ImportSummary,
    MatrixLayout,
    MatrixProductData,
    get_layout,
)
from .media import EmbeddedMediaQueue, ImageBlob, detect_extension, download_image
from .template import TEMPLATE_FILENAME, XLSX_CONTENT_TYPE, build_matrix_template

__all__ = [
    "MatrixImportError",
    "MatrixRowError",
    "SUMMARY_MESSAGE",
    "MatrixImporter",
    "find_selected_category",
    "import_matrix_workbook",
    "DEFAULT_LAYOUT",
    "INLINE",
    "LAYOUTS",
    "STACKED",
    "ImportSummary",
    "MatrixLayout",
    "MatrixProductData",
    "get_layout",
    "EmbeddedMediaQueue",
    "ImageBlob",
    "detect_extension",
    "download_image",
    "TEMPLATE_FILENAME",
    "XLSX_CONTENT_TYPE",
    "build_matrix_template",
]
