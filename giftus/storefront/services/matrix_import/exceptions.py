"""
Errors raised by the matrix import pipeline.
"""


class MatrixImportError(Exception):
    """The upload as a whole cannot be processed (empty file, bad category, broken workbook)."""


class MatrixRowError(Exception):
    """A single product block is invalid; the rest of the sheet is still imported."""
