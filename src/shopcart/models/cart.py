from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from shopcart.models.coupon import Coupon


@dataclass
class CartItem:
    """
    A single product + quantity pair inside a cart.

    unit_price is the catalog price at the moment the item was first added
    and is never refreshed afterwards; only quantity changes.
    """
    product_id: str
    quantity: int
    unit_price: Decimal
    name: str = ""

    @property
    def line_total(self) -> Decimal:
        """Unrounded unit_price * quantity"""
        return self.unit_price * self.quantity


@dataclass
class CartTotals:
    """Derived cart figures, recomputed from items on every read"""
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    total_items: int


@dataclass
class Cart:
    """
    A user's shopping cart.

    version is the optimistic-concurrency token owned by the repository:
    0 means the cart has never been saved.
    """
    owner_id: str
    items: List[CartItem] = field(default_factory=list)
    coupon: Optional[Coupon] = None
    version: int = 0

    @property
    def coupon_code(self) -> Optional[str]:
        return self.coupon.code if self.coupon else None

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def get_item(self, product_id: str) -> Optional[CartItem]:
        """Find cart item by product ID"""
        return next((item for item in self.items if item.product_id == product_id), None)
