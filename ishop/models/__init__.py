"""
All storefront models. Imported here so callers have one place to import from.
"""

from .product import Product, ProductConcept, ProductDraft
from .order import PaymentMode, OrderStatus, CartLine, Order
from .commission import DesignRequest
from .profile import ShopperProfile

__all__ = [
    "Product", "ProductConcept", "ProductDraft",
    "PaymentMode", "OrderStatus", "CartLine", "Order",
    "DesignRequest",
    "ShopperProfile",
]
