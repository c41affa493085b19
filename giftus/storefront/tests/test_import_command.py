"""
Tests for the import_matrix management command.
"""
import os
import shutil
import tempfile
from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase

from storefront.models import Category, Product

from .helpers import block, build_matrix_workbook


class ImportMatrixCommandTests(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.media_override = self.settings(MEDIA_ROOT=os.path.join(self.tmpdir, 'media'))
        self.media_override.enable()

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def write_workbook(self, blocks, name='price-list.xlsx'):
        path = os.path.join(self.tmpdir, name)
        with open(path, 'wb') as fh:
            fh.write(build_matrix_workbook(blocks))
        return path

    def test_imports_file(self):
        path = self.write_workbook([block(2, 1, 'NWD-1'), block(2, 2, 'TPHY-2')])
        out = StringIO()

        call_command('import_matrix', path, stdout=out)

        self.assertEqual(Product.objects.count(), 2)
        output = out.getvalue()
        self.assertIn('Всего: 2, успешно: 2, ошибок: 0', output)
        self.assertIn('Импорт успешно завершён', output)

    def test_reports_row_errors(self):
        path = self.write_workbook([block(2, 1, 'NWD-1'), block(2, 2, 'TPHY-2', size=None)])
        out = StringIO()

        call_command('import_matrix', path, stdout=out)

        output = out.getvalue()
        self.assertIn('Size is required', output)
        self.assertIn('Импорт завершён с ошибками', output)

    def test_selected_category(self):
        category = Category.objects.create(name='Corporate Gifts', slug='corporate-gifts')
        path = self.write_workbook([block(2, 1, 'NWD-1')])

        call_command('import_matrix', path, '--category', 'Corporate Gifts', stdout=StringIO())

        self.assertEqual(Product.objects.get().category, category)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_matrix', os.path.join(self.tmpdir, 'nope.xlsx'))

    def test_unknown_category(self):
        path = self.write_workbook([block(2, 1, 'NWD-1')])

        with self.assertRaisesMessage(CommandError, 'Invalid category: Medals'):
            call_command('import_matrix', path, '--category', 'Medals', stdout=StringIO())
