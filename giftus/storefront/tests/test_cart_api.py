"""
Tests for the session cart API and checkout.

Tests:
- list: cart contents priced from the catalog
- add / remove / clear
- checkout: order creation from the cart
"""
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from orders.models import Order

from .helpers import make_category, make_product


class CartApiTests(APITestCase):
    def setUp(self):
        category = make_category("Trophies")
        self.product = make_product(category, "NWD-1", price="100.00")
        self.variant = self.product.variants.get()
        self.other = make_product(category, "NWD-2", price="250.00", gst_percent="12.00")
        self.other_variant = self.other.variants.get()

    def add(self, variant, quantity=1, **extra):
        payload = {'variant_id': variant.pk, 'quantity': quantity, **extra}
        return self.client.post(reverse('api-cart-add'), payload, format='json')

    def test_empty_cart(self):
        response = self.client.get(reverse('api-cart-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'items': [], 'cart_count': 0, 'total': '0.00'})

    def test_add_and_list(self):
        response = self.add(self.variant, 2)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], '"NWD-1 - 10"" added to cart')
        self.assertEqual(response.data['cart_count'], 2)

        cart = self.client.get(reverse('api-cart-list')).data
        self.assertEqual(cart['cart_count'], 2)
        self.assertEqual(cart['total'], '200.00')
        self.assertEqual(cart['items'][0]['line_total'], '200.00')

    def test_adding_same_variant_accumulates(self):
        self.add(self.variant, 1)
        response = self.add(self.variant, 3)

        self.assertEqual(response.data['cart_count'], 4)

    def test_customizations_are_kept(self):
        self.add(self.variant, 1, customizations={'engraving': 'Best Employee 2024'})

        cart = self.client.get(reverse('api-cart-list')).data
        self.assertEqual(cart['items'][0]['customizations'], {'engraving': 'Best Employee 2024'})

    def test_prices_come_from_catalog(self):
        """Цена в корзине всегда актуальная, даже если поменялась после добавления."""
        self.add(self.variant, 1)
        self.variant.price = Decimal('120.00')
        self.variant.save()

        cart = self.client.get(reverse('api-cart-list')).data
        self.assertEqual(cart['total'], '120.00')

    def test_add_unknown_variant(self):
        response = self.client.post(reverse('api-cart-add'), {'variant_id': 9999}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Product variant not found or unavailable')

    def test_add_inactive_product(self):
        self.product.is_active = False
        self.product.save()

        response = self.add(self.variant)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_invalid_quantity(self):
        response = self.add(self.variant, 0)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_deactivated_product_dropped_from_cart(self):
        self.add(self.variant, 1)
        self.add(self.other_variant, 1)
        self.other.is_active = False
        self.other.save()

        cart = self.client.get(reverse('api-cart-list')).data
        self.assertEqual([item['variant_id'] for item in cart['items']], [self.variant.pk])

    def test_remove(self):
        self.add(self.variant, 1)
        self.add(self.other_variant, 1)

        response = self.client.post(
            reverse('api-cart-remove'), {'variant_id': self.variant.pk}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cart_count'], 1)

    def test_remove_requires_variant_id(self):
        response = self.client.post(reverse('api-cart-remove'), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'variant_id is required')

    def test_remove_missing_item(self):
        response = self.client.post(
            reverse('api-cart-remove'), {'variant_id': self.variant.pk}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Item not found in cart')

    def test_clear(self):
        self.add(self.variant, 2)

        response = self.client.post(reverse('api-cart-clear'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse('api-cart-list')).data['cart_count'], 0)


class CartCheckoutTests(APITestCase):
    def setUp(self):
        category = make_category("Trophies")
        self.variant = make_product(category, "NWD-1", price="100.00").variants.get()
        self.other_variant = make_product(
            category, "NWD-2", price="250.00", gst_percent="12.00"
        ).variants.get()
        self.customer = {
            'customer_name': 'Asha Rao',
            'customer_email': 'asha@example.com',
            'customer_phone': '+91 98765 43210',
            'delivery_address': '12 MG Road, Pune 411001',
        }

    def test_checkout_creates_order_and_clears_cart(self):
        self.client.post(
            reverse('api-cart-add'),
            {'variant_id': self.variant.pk, 'quantity': 2, 'customizations': {'engraving': 'Team A'}},
            format='json',
        )
        self.client.post(
            reverse('api-cart-add'), {'variant_id': self.other_variant.pk, 'quantity': 1}, format='json'
        )

        response = self.client.post(reverse('api-cart-checkout'), self.customer, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '566.00')
        self.assertEqual(response.data['message'], 'Order created successfully. Proceed to payment.')

        order = Order.objects.get(pk=response.data['order_id'])
        self.assertEqual(order.order_number, response.data['order_number'])
        self.assertEqual(order.items.count(), 2)
        engraved = order.items.get(variant=self.variant)
        self.assertEqual(engraved.customizations.get().value, 'Team A')

        self.assertEqual(self.client.get(reverse('api-cart-list')).data['items'], [])

    def test_checkout_empty_cart(self):
        response = self.client.post(reverse('api-cart-checkout'), self.customer, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Cart is empty'})
        self.assertFalse(Order.objects.exists())

    def test_checkout_validates_customer(self):
        self.client.post(reverse('api-cart-add'), {'variant_id': self.variant.pk}, format='json')

        response = self.client.post(
            reverse('api-cart-checkout'),
            {**self.customer, 'customer_email': 'not-an-email'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer_email', response.data)
