import copy
import threading
from decimal import Decimal
from typing import Dict, List, Optional, Any

from shopcart.core.exceptions import Conflict
from shopcart.models.cart import Cart, CartItem
from shopcart.models.coupon import Coupon, DiscountType
from shopcart.repositories.base import CartRepository, SqlRepository
from shopcart.utils.date_utils import DateUtils
from shopcart.utils.money_utils import MoneyUtils
import logging

logger = logging.getLogger(__name__)


class SqlCartRepository(SqlRepository, CartRepository):
    """
    Carts stored in carts / cart_items

    save() is a compare-and-swap on carts.version inside one transaction:
    the header row is updated only if its version still matches the one the
    cart was loaded with, then the item rows are replaced wholesale.
    """

    def load(self, owner_id: str) -> Cart:
        with self.transaction() as conn:
            header = self.execute_single_query(
                """
                SELECT owner_id, version, coupon_code, coupon_type, coupon_value, coupon_expires_at
                FROM carts
                WHERE owner_id = :owner_id
                """,
                {"owner_id": owner_id},
                conn,
            )
            if not header:
                return Cart(owner_id=owner_id)

            rows = self.execute_query(
                """
                SELECT product_id, name, unit_price, quantity
                FROM cart_items
                WHERE owner_id = :owner_id
                ORDER BY position
                """,
                {"owner_id": owner_id},
                conn,
            )

        return self._build_cart(header, rows)

    def save(self, cart: Cart) -> Cart:
        new_version = cart.version + 1
        params = {
            "owner_id": cart.owner_id,
            "expected_version": cart.version,
            "new_version": new_version,
            "coupon_code": cart.coupon.code if cart.coupon else None,
            "coupon_type": DiscountType(cart.coupon.discount_type).value if cart.coupon else None,
            "coupon_value": str(cart.coupon.value) if cart.coupon else None,
            "coupon_expires_at": self._expiry_param(cart.coupon),
        }

        with self.transaction() as conn:
            if cart.version == 0:
                written = self.execute_command(
                    """
                    INSERT INTO carts (
                        owner_id, version, coupon_code, coupon_type, coupon_value, coupon_expires_at, updated_at
                    )
                    VALUES (
                        :owner_id, :new_version, :coupon_code, :coupon_type, :coupon_value,
                        :coupon_expires_at, CURRENT_TIMESTAMP
                    )
                    ON CONFLICT (owner_id) DO NOTHING
                    """,
                    params,
                    conn,
                )
            else:
                written = self.execute_command(
                    """
                    UPDATE carts
                    SET version = :new_version,
                        coupon_code = :coupon_code,
                        coupon_type = :coupon_type,
                        coupon_value = :coupon_value,
                        coupon_expires_at = :coupon_expires_at,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE owner_id = :owner_id AND version = :expected_version
                    """,
                    params,
                    conn,
                )

            if written != 1:
                logger.warning(
                    f"Version conflict saving cart for owner {cart.owner_id} "
                    f"(expected version {cart.version})"
                )
                raise Conflict(cart.owner_id, cart.version)

            self.execute_command(
                "DELETE FROM cart_items WHERE owner_id = :owner_id",
                {"owner_id": cart.owner_id},
                conn,
            )
            if cart.items:
                self.execute_command(
                    """
                    INSERT INTO cart_items (owner_id, product_id, position, name, unit_price, quantity)
                    VALUES (:owner_id, :product_id, :position, :name, :unit_price, :quantity)
                    """,
                    [
                        {
                            "owner_id": cart.owner_id,
                            "product_id": item.product_id,
                            "position": position,
                            "name": item.name,
                            "unit_price": str(MoneyUtils.to_decimal(item.unit_price)),
                            "quantity": item.quantity,
                        }
                        for position, item in enumerate(cart.items)
                    ],
                    conn,
                )

        cart.version = new_version
        return cart

    def _expiry_param(self, coupon: Optional[Coupon]) -> Optional[str]:
        if coupon is None or coupon.expires_at is None:
            return None
        return DateUtils.to_utc(coupon.expires_at).isoformat()

    def _build_cart(self, header: Dict[str, Any], rows: List[Dict[str, Any]]) -> Cart:
        coupon = None
        if header["coupon_code"]:
            coupon = Coupon(
                code=header["coupon_code"],
                discount_type=DiscountType(header["coupon_type"]),
                value=Decimal(header["coupon_value"]),
                expires_at=DateUtils.parse_datetime(header["coupon_expires_at"]),
            )

        items = [
            CartItem(
                product_id=row["product_id"],
                quantity=int(row["quantity"]),
                unit_price=Decimal(row["unit_price"]),
                name=row["name"] or "",
            )
            for row in rows
        ]
        return Cart(
            owner_id=header["owner_id"],
            items=items,
            coupon=coupon,
            version=int(header["version"]),
        )


class InMemoryCartRepository(CartRepository):
    """
    Process-local cart store with the same versioning contract as the SQL
    repository. Carts are deep-copied in and out so callers never share state
    with the store.
    """

    def __init__(self):
        self._carts: Dict[str, Cart] = {}
        self._lock = threading.Lock()

    def load(self, owner_id: str) -> Cart:
        with self._lock:
            stored = self._carts.get(owner_id)
            return copy.deepcopy(stored) if stored else Cart(owner_id=owner_id)

    def save(self, cart: Cart) -> Cart:
        with self._lock:
            stored = self._carts.get(cart.owner_id)
            current_version = stored.version if stored else 0
            if current_version != cart.version:
                logger.warning(
                    f"Version conflict saving cart for owner {cart.owner_id} "
                    f"(expected {cart.version}, found {current_version})"
                )
                raise Conflict(cart.owner_id, cart.version)

            cart.version = current_version + 1
            self._carts[cart.owner_id] = copy.deepcopy(cart)
            return cart
