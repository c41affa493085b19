"""
Service layer for storefront: bulk matrix import of price lists.
"""
