"""
Unit tests for storefront views module.

Test structure:
- test_auth.py: Authentication tests (login, register, logout)
- test_cart.py: Shopping cart tests
- test_checkout.py: Checkout and order creation tests
- test_product.py: Product views tests
- test_catalog.py: Catalog and search tests
"""



