"""
Tests for cell-level parsing of the matrix price list.
"""
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from storefront.services.matrix_import.parsing import (
    category_code,
    cell_text,
    is_valid_model_no,
    normalize_category_name,
    parse_gst,
    parse_price,
    parse_quantity,
    product_slug_base,
)


class CellTextTests(SimpleTestCase):
    def test_none_is_empty(self):
        self.assertEqual(cell_text(None), "")

    def test_whole_float_loses_decimal_part(self):
        self.assertEqual(cell_text(29.0), "29")

    def test_fractional_float_is_kept(self):
        self.assertEqual(cell_text(12.5), "12.5")

    def test_text_is_stripped(self):
        self.assertEqual(cell_text("  NWD-1 \n"), "NWD-1")


class PriceParsingTests(SimpleTestCase):
    def test_rupee_prefix_and_thousands_separator(self):
        self.assertEqual(parse_price("Rs. 1,500"), Decimal("1500.00"))

    def test_rupee_sign_with_paise(self):
        self.assertEqual(parse_price("₹ 2,450.50"), Decimal("2450.50"))

    def test_inr_suffix(self):
        self.assertEqual(parse_price("899 INR"), Decimal("899.00"))

    def test_plain_number(self):
        self.assertEqual(parse_price("750"), Decimal("750.00"))

    def test_garbage_and_empty_fall_back_to_zero(self):
        self.assertEqual(parse_price("call us"), Decimal("0.00"))
        self.assertEqual(parse_price(""), Decimal("0.00"))

    def test_ambiguous_separators_fall_back_to_zero(self):
        self.assertEqual(parse_price("1.500.00"), Decimal("0.00"))


class QuantityParsingTests(SimpleTestCase):
    def test_integer(self):
        self.assertEqual(parse_quantity("25"), 25)

    def test_whole_decimal_text(self):
        self.assertEqual(parse_quantity("25.0"), 25)

    def test_unparsable_is_zero(self):
        self.assertEqual(parse_quantity("ten"), 0)
        self.assertEqual(parse_quantity("2.5"), 0)
        self.assertEqual(parse_quantity(""), 0)

    def test_negative_is_zero(self):
        self.assertEqual(parse_quantity("-4"), 0)


class GstParsingTests(SimpleTestCase):
    def test_number_after_gst(self):
        self.assertEqual(parse_gst("HSN 9403 GST 12%"), Decimal("12.00"))

    def test_case_insensitive_with_separator(self):
        self.assertEqual(parse_gst("hsn 8306, gst@5"), Decimal("5.00"))

    def test_decimal_rate(self):
        self.assertEqual(parse_gst("GST 2.5"), Decimal("2.50"))

    def test_default_when_missing(self):
        self.assertEqual(parse_gst("HSN 9403"), Decimal("18.00"))
        self.assertEqual(parse_gst(""), Decimal("18.00"))

    @override_settings(DEFAULT_GST_PERCENT="12")
    def test_default_follows_settings(self):
        self.assertEqual(parse_gst(""), Decimal("12.00"))


class ModelNumberTests(SimpleTestCase):
    def test_valid_model_numbers(self):
        for value in ("NWD-1", "TPHY_001", "Crystal 12"):
            with self.subTest(value=value):
                self.assertTrue(is_valid_model_no(value))

    def test_invalid_model_numbers(self):
        for value in ("", "NWD#1", "A/B", "Кубок"):
            with self.subTest(value=value):
                self.assertFalse(is_valid_model_no(value))

    def test_category_code_is_leading_capitals(self):
        self.assertEqual(category_code("NWD-1"), "NWD")
        self.assertEqual(category_code("TPHY001"), "TPHY")

    def test_category_code_without_capitals_is_whole_model_no(self):
        self.assertEqual(category_code("123-A"), "123-A")
        self.assertEqual(category_code("nwd-1"), "nwd-1")

    def test_slug_replaces_inch_mark(self):
        self.assertEqual(product_slug_base("NWD-1", '10"'), "nwd-1-10in")

    def test_slug_for_word_size(self):
        self.assertEqual(product_slug_base("TPHY 7", "Large"), "tphy-7-large")

    def test_category_name_underscores(self):
        self.assertEqual(normalize_category_name("Corporate_Gifts"), "Corporate Gifts")
