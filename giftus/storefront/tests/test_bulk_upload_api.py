"""
Tests for the bulk upload endpoints (matrix import and template download).
"""
import shutil
import tempfile
from io import BytesIO
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from openpyxl import load_workbook
from rest_framework import status
from rest_framework.test import APITestCase

from storefront.models import Category, Product
from storefront.services.matrix_import import INLINE

from .helpers import XLSX_CONTENT_TYPE, block, build_matrix_workbook


def xlsx_upload(content, name="price-list.xlsx"):
    return SimpleUploadedFile(name, content, content_type=XLSX_CONTENT_TYPE)


class BulkUploadApiTests(APITestCase):
    def setUp(self):
        self.url = reverse('api-bulk-upload-upload-matrix')
        self.media_root = tempfile.mkdtemp()
        self.media_override = self.settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_upload_imports_products(self):
        """Обе позиции блока попадают в каталог, итоги возвращаются в summary."""
        workbook = build_matrix_workbook([
            block(2, 1, "NWD-1"),
            block(2, 2, "NWD#2"),
        ])

        response = self.client.post(self.url, {'file': xlsx_upload(workbook)}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Bulk matrix upload completed')
        summary = response.data['summary']
        self.assertEqual(summary['total_rows'], 2)
        self.assertEqual(summary['successful_rows'], 1)
        self.assertEqual(summary['failed_rows'], 1)
        self.assertEqual(len(summary['errors']), 1)
        self.assertIn('ModelNo NWD#2', summary['errors'][0])
        self.assertTrue(Product.objects.filter(model_no='NWD-1').exists())

    def test_upload_into_selected_category(self):
        category = Category.objects.create(name='Corporate Gifts', slug='corporate-gifts')
        workbook = build_matrix_workbook([block(2, 1, "NWD-1")])

        response = self.client.post(
            self.url,
            {'file': xlsx_upload(workbook), 'category': 'Corporate_Gifts'},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Product.objects.get().category, category)

    def test_upload_with_inline_layout(self):
        workbook = build_matrix_workbook([block(2, 1, "NWD-1")], layout=INLINE)

        response = self.client.post(
            self.url,
            {'file': xlsx_upload(workbook), 'layout': 'inline'},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['successful_rows'], 1)

    def test_missing_file(self):
        response = self.client.post(self.url, {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'No file provided'})

    def test_wrong_extension(self):
        upload = SimpleUploadedFile('price-list.csv', b'ModelNo,Size\n', content_type='text/csv')

        response = self.client.post(self.url, {'file': upload}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only Excel files (.xlsx, .xlsm) are supported')

    @override_settings(BULK_IMPORT_MAX_UPLOAD_SIZE=1024 * 1024)
    def test_file_too_large(self):
        upload = xlsx_upload(b'0' * (1024 * 1024 + 1))

        response = self.client.post(self.url, {'file': upload}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File size exceeds 1 MB limit')

    def test_unknown_category(self):
        workbook = build_matrix_workbook([block(2, 1, "NWD-1")])

        response = self.client.post(
            self.url,
            {'file': xlsx_upload(workbook), 'category': 'Medals'},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Invalid category: Medals'})
        self.assertFalse(Product.objects.exists())

    def test_empty_workbook(self):
        response = self.client.post(
            self.url, {'file': xlsx_upload(build_matrix_workbook([]))}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Excel file is empty'})

    def test_corrupt_workbook(self):
        response = self.client.post(
            self.url, {'file': xlsx_upload(b'not really a workbook')}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error'].startswith('Unable to read Excel file'))

    @mock.patch('storefront.viewsets.import_matrix_workbook', side_effect=RuntimeError('database is locked'))
    def test_unexpected_failure(self, _import):
        workbook = build_matrix_workbook([block(2, 1, "NWD-1")])

        response = self.client.post(self.url, {'file': xlsx_upload(workbook)}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to process bulk upload')
        self.assertEqual(response.data['detail'], 'database is locked')


class MatrixTemplateApiTests(APITestCase):
    def test_template_download(self):
        response = self.client.get(reverse('api-bulk-upload-template-matrix'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertIn('matrix_upload_template.xlsx', response['Content-Disposition'])

        worksheet = load_workbook(BytesIO(response.content)).active
        self.assertEqual(worksheet.cell(row=1, column=3).value, 'Model No')
        self.assertEqual(worksheet.cell(row=2, column=3).value, 'NWD-1')
        self.assertEqual(worksheet.cell(row=2, column=11).value, 'TPHY-101')

    def test_template_can_be_imported(self):
        template = self.client.get(reverse('api-bulk-upload-template-matrix')).content

        response = self.client.post(
            reverse('api-bulk-upload-upload-matrix'),
            {'file': xlsx_upload(template, 'matrix_upload_template.xlsx')},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['successful_rows'], 2)
        self.assertEqual(
            sorted(Product.objects.values_list('model_no', flat=True)),
            ['NWD-1', 'TPHY-101'],
        )

    def test_unknown_layout(self):
        response = self.client.get(reverse('api-bulk-upload-template-matrix'), {'layout': 'diagonal'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
