from .cart import Cart, CartItem, CartTotals
from .coupon import Coupon, DiscountType
from .product import ProductSnapshot

__all__ = [
    "Cart", "CartItem", "CartTotals",
    "Coupon", "DiscountType",
    "ProductSnapshot",
]
