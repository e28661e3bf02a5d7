from typing import Callable, Tuple
from shopcart.core.dependencies import CartContext
from shopcart.core.exceptions import BaseAPIException, Conflict, InvalidQuantity
from shopcart.models.cart import Cart, CartTotals
from shopcart.schemas.cart_schemas import AddItemCommand, UpdateItemCommand, ApplyCouponCommand
import logging

logger = logging.getLogger(__name__)


class CartService:
    """
    Shopping cart orchestration

    Responsibilities:
    - Load the owner's cart, apply one CartEngine transform, save it
    - Retry the whole cycle when the save hits a version conflict
    - Enforce the per-line quantity cap from configuration
    - Log every operation; the engine itself stays silent
    """

    def __init__(self, context: CartContext):
        self.context = context
        self.engine = context.engine
        self.max_save_attempts = context.config.cart.max_save_attempts
        self.max_quantity_per_item = context.config.cart.max_quantity_per_item

    def get_cart(self, owner_id: str) -> Tuple[Cart, CartTotals]:
        """Current cart and freshly derived totals; never writes"""
        logger.info(f"Fetching cart for owner {owner_id}")
        cart = self.context.carts.load(owner_id)
        return cart, self.engine.compute_totals(cart)

    def get_count(self, owner_id: str) -> int:
        """Number of units in the cart (sum of quantities)"""
        _, totals = self.get_cart(owner_id)
        return totals.total_items

    def get_summary(self, owner_id: str) -> Tuple[Cart, CartTotals]:
        """
        Totals for the header/checkout widgets

        Same data as get_cart; callers render only the totals and the
        applied coupon, not the item lines.
        """
        logger.info(f"Fetching cart summary for owner {owner_id}")
        cart = self.context.carts.load(owner_id)
        return cart, self.engine.compute_totals(cart)

    def add_item(self, owner_id: str, command: AddItemCommand) -> Tuple[Cart, CartTotals]:
        logger.info(
            f"Adding item to cart - owner: {owner_id}, product: {command.product_id}, "
            f"quantity: {command.quantity}"
        )

        def transform(cart: Cart) -> Cart:
            existing = cart.get_item(command.product_id)
            in_cart = existing.quantity if existing else 0
            self._check_quantity_cap(in_cart + command.quantity)
            return self.engine.add_item(
                cart, command.product_id, command.quantity, self.context.catalog
            )

        return self._mutate(owner_id, "add_item", transform)

    def update_item(
        self,
        owner_id: str,
        product_id: str,
        command: UpdateItemCommand
    ) -> Tuple[Cart, CartTotals]:
        """Set a line's quantity; 0 removes the line"""
        logger.info(
            f"Updating cart item {product_id} for owner {owner_id} to quantity {command.quantity}"
        )

        def transform(cart: Cart) -> Cart:
            self._check_quantity_cap(command.quantity)
            return self.engine.update_item_quantity(
                cart, product_id, command.quantity, self.context.catalog
            )

        return self._mutate(owner_id, "update_item", transform)

    def remove_item(self, owner_id: str, product_id: str) -> Tuple[Cart, CartTotals]:
        logger.info(f"Removing cart item {product_id} for owner {owner_id}")
        return self._mutate(
            owner_id, "remove_item", lambda cart: self.engine.remove_item(cart, product_id)
        )

    def clear_cart(self, owner_id: str) -> Tuple[Cart, CartTotals]:
        logger.info(f"Clearing cart for owner {owner_id}")
        return self._mutate(owner_id, "clear_cart", self.engine.clear)

    def apply_coupon(self, owner_id: str, command: ApplyCouponCommand) -> Tuple[Cart, CartTotals]:
        logger.info(f"Applying coupon {command.code} to cart for owner {owner_id}")
        return self._mutate(
            owner_id,
            "apply_coupon",
            lambda cart: self.engine.apply_coupon(cart, command.code, self.context.coupons),
        )

    def remove_coupon(self, owner_id: str) -> Tuple[Cart, CartTotals]:
        logger.info(f"Removing coupon from cart for owner {owner_id}")
        return self._mutate(owner_id, "remove_coupon", self.engine.remove_coupon)

    # Private helper methods
    def _mutate(
        self,
        owner_id: str,
        action: str,
        transform: Callable[[Cart], Cart]
    ) -> Tuple[Cart, CartTotals]:
        """
        load -> transform -> save, repeated on Conflict

        Each attempt starts from a fresh load so the transform is re-applied
        to whatever the competing writer saved.
        """
        for attempt in range(1, self.max_save_attempts + 1):
            cart = self.context.carts.load(owner_id)
            try:
                cart = transform(cart)
            except BaseAPIException as e:
                logger.warning(f"{action} rejected for owner {owner_id}: {e.error_code} {e.details}")
                raise

            try:
                saved = self.context.carts.save(cart)
            except Conflict:
                if attempt == self.max_save_attempts:
                    logger.error(
                        f"{action} for owner {owner_id} gave up after {attempt} conflicting saves"
                    )
                    raise
                logger.warning(f"{action} for owner {owner_id} conflicted, retrying ({attempt})")
                continue

            totals = self.engine.compute_totals(saved)
            logger.info(
                f"{action} done for owner {owner_id}: {totals.total_items} units, "
                f"total={totals.total} (version {saved.version})"
            )
            return saved, totals

        # max_save_attempts < 1 is rejected by Config.validate()
        raise Conflict(owner_id)

    def _check_quantity_cap(self, quantity: int) -> None:
        if quantity > self.max_quantity_per_item:
            raise InvalidQuantity(
                quantity,
                f"Cannot have more than {self.max_quantity_per_item} of the same item"
            )
