"""
Tests for the welcome and health-check endpoints.
"""
from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase


class ServiceEndpointTests(APITestCase):
    def test_welcome_lists_endpoints(self):
        response = self.client.get(reverse('welcome'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['service'], 'Giftus API')
        self.assertEqual(response.data['endpoints']['products'], '/api/products/')
        self.assertIn('timestamp', response.data)

    def test_health_ok(self):
        response = self.client.get(reverse('health'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'healthy')
        self.assertEqual(response.data['database'], 'ok')

    def test_health_reports_database_outage(self):
        with mock.patch('giftus.views.connection') as connection:
            connection.cursor.side_effect = DatabaseError('gone away')
            response = self.client.get(reverse('health'))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['status'], 'unhealthy')
