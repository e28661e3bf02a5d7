from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from shopcart.core.exceptions import (
    InvalidQuantity, ProductNotFound, InsufficientStock, ItemNotFound, InvalidCoupon
)
from shopcart.models.cart import Cart, CartItem, CartTotals
from shopcart.models.coupon import Coupon, DiscountType
from shopcart.models.product import ProductSnapshot
from shopcart.repositories.base import CatalogLookup, CouponLookup
from shopcart.utils.date_utils import DateUtils
from shopcart.utils.money_utils import MoneyUtils
from shopcart.utils.validators import ValidationUtils


class CartEngine:
    """
    Cart mutation and pricing rules

    Every method works on an in-memory Cart and either mutates it in place
    and returns it, or raises without touching it. Nothing here persists,
    logs or retries; that is CartService's job.
    """

    def __init__(self, clock: Callable[[], datetime] = DateUtils.now_utc):
        self._clock = clock

    def add_item(self, cart: Cart, product_id: str, quantity: int, catalog: CatalogLookup) -> Cart:
        """
        Add a product, merging into an existing line if present

        Business Rules:
        - quantity must be a positive integer
        - product must exist and be active
        - quantity already in cart + requested must not exceed stock
        - unit_price is snapshotted only when the line is created
        """
        if not ValidationUtils.is_positive_quantity(quantity):
            raise InvalidQuantity(quantity)

        product = self._get_product(product_id, catalog)

        existing = cart.get_item(product_id)
        in_cart = existing.quantity if existing else 0
        new_quantity = in_cart + quantity

        if new_quantity > product.stock:
            raise InsufficientStock(product_id, new_quantity, product.stock, in_cart)

        if existing:
            existing.quantity = new_quantity
        else:
            cart.items.append(
                CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=MoneyUtils.to_decimal(product.price),
                    name=product.name,
                )
            )
        return cart

    def update_item_quantity(
        self,
        cart: Cart,
        product_id: str,
        new_quantity: int,
        catalog: CatalogLookup
    ) -> Cart:
        """
        Set a line's quantity; 0 removes the line
        """
        if not ValidationUtils.is_non_negative_quantity(new_quantity):
            raise InvalidQuantity(new_quantity, "Quantity must be a non-negative integer")

        item = cart.get_item(product_id)
        if item is None:
            raise ItemNotFound(product_id)

        if new_quantity == 0:
            return self.remove_item(cart, product_id)

        product = self._get_product(product_id, catalog)
        if new_quantity > product.stock:
            raise InsufficientStock(product_id, new_quantity, product.stock)

        item.quantity = new_quantity
        return cart

    def remove_item(self, cart: Cart, product_id: str) -> Cart:
        if cart.get_item(product_id) is None:
            raise ItemNotFound(product_id)
        cart.items = [item for item in cart.items if item.product_id != product_id]
        return cart

    def clear(self, cart: Cart) -> Cart:
        """Remove all items and any applied coupon"""
        cart.items = []
        cart.coupon = None
        return cart

    def apply_coupon(
        self,
        cart: Cart,
        code: str,
        coupons: CouponLookup,
        now: Optional[datetime] = None
    ) -> Cart:
        """Apply a coupon, replacing whichever one was active"""
        normalized = ValidationUtils.normalize_coupon_code(code)
        if not normalized:
            raise InvalidCoupon(code, "empty")

        coupon = coupons.get(normalized)
        if coupon is None:
            raise InvalidCoupon(normalized, "unknown")

        if DateUtils.is_expired(coupon.expires_at, now or self._clock()):
            raise InvalidCoupon(normalized, "expired")

        cart.coupon = coupon
        return cart

    def remove_coupon(self, cart: Cart) -> Cart:
        cart.coupon = None
        return cart

    def compute_totals(self, cart: Cart) -> CartTotals:
        """
        Derive subtotal, discount, total and unit count from the items

        The subtotal is rounded once, after summing, so per-line rounding
        error never accumulates.
        """
        subtotal = MoneyUtils.quantize(
            sum((item.line_total for item in cart.items), Decimal("0"))
        )
        discount = self._discount_for(cart.coupon, subtotal)
        return CartTotals(
            subtotal=subtotal,
            discount=discount,
            total=subtotal - discount,
            total_items=sum(item.quantity for item in cart.items),
        )

    # Private helper methods
    def _get_product(self, product_id: str, catalog: CatalogLookup) -> ProductSnapshot:
        product = catalog.get(product_id)
        if product is None or not product.is_active:
            raise ProductNotFound(product_id)
        return product

    def _discount_for(self, coupon: Optional[Coupon], subtotal: Decimal) -> Decimal:
        if coupon is None:
            return MoneyUtils.ZERO

        if coupon.discount_type == DiscountType.PERCENTAGE:
            discount = MoneyUtils.quantize(subtotal * coupon.value / 100)
        else:
            discount = MoneyUtils.quantize(coupon.value)

        # total never goes negative
        return min(max(discount, MoneyUtils.ZERO), subtotal)
