from .base import CartRepository, CatalogLookup, CouponLookup
from .cart_repository import SqlCartRepository, InMemoryCartRepository
from .coupon_repository import CouponRepository, InMemoryCoupons
from .product_repository import ProductRepository, InMemoryCatalog

__all__ = [
    "CartRepository", "CatalogLookup", "CouponLookup",
    "SqlCartRepository", "InMemoryCartRepository",
    "CouponRepository", "InMemoryCoupons",
    "ProductRepository", "InMemoryCatalog",
]
