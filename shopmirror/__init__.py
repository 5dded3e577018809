"""
Shopmirror

Keeps a local mirror of Shopify orders, customers, products and inventory.
"""
__version__ = "1.0.0"
