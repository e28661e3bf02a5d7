from flask import Blueprint

from shopcart.routes.schemas import dump_cart, dump_summary
from shopcart.routes.utils import get_context, get_current_owner_id, parse_command, success_response
from shopcart.schemas.cart_schemas import AddItemCommand, UpdateItemCommand, ApplyCouponCommand
from shopcart.services.cart_service import CartService


cart_bp = Blueprint("cart", __name__)


def _service() -> CartService:
    return CartService(get_context())


def _respond(cart, totals, message=None, status=200):
    currency = get_context().config.cart.currency
    return success_response(dump_cart(cart, totals, currency), message, status)


@cart_bp.route("", methods=["GET"])
def get_cart():
    """Return the current user's cart with computed totals."""
    cart, totals = _service().get_cart(get_current_owner_id())
    return _respond(cart, totals)


@cart_bp.route("/count", methods=["GET"])
def get_cart_count():
    """Number of units in the cart, for header badges."""
    count = _service().get_count(get_current_owner_id())
    return success_response({"totalItems": count})


@cart_bp.route("/summary", methods=["GET"])
def get_cart_summary():
    """Totals and applied coupon without the item lines."""
    cart, totals = _service().get_summary(get_current_owner_id())
    currency = get_context().config.cart.currency
    return success_response(dump_summary(cart, totals, currency))


@cart_bp.route("/items", methods=["POST"])
def add_cart_item():
    """Add a product to the cart, or increment quantity if already present."""
    owner_id = get_current_owner_id()
    command = parse_command(AddItemCommand)
    cart, totals = _service().add_item(owner_id, command)
    return _respond(cart, totals, "Item added to cart successfully", 201)


@cart_bp.route("/items/<item_id>", methods=["PUT"])
def update_cart_item(item_id: str):
    """Update the quantity of a cart item. Setting quantity to 0 removes it."""
    owner_id = get_current_owner_id()
    command = parse_command(UpdateItemCommand)
    cart, totals = _service().update_item(owner_id, item_id, command)
    return _respond(cart, totals, "Cart item updated successfully")


@cart_bp.route("/items/<item_id>", methods=["DELETE"])
def remove_cart_item(item_id: str):
    """Remove an item from the cart."""
    cart, totals = _service().remove_item(get_current_owner_id(), item_id)
    return _respond(cart, totals, "Item removed from cart successfully")


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    """Empty the cart and drop any coupon."""
    cart, totals = _service().clear_cart(get_current_owner_id())
    return _respond(cart, totals, "Cart cleared successfully")


@cart_bp.route("/coupon", methods=["POST"])
def apply_coupon():
    owner_id = get_current_owner_id()
    command = parse_command(ApplyCouponCommand)
    cart, totals = _service().apply_coupon(owner_id, command)
    return _respond(cart, totals, "Coupon applied")


@cart_bp.route("/coupon", methods=["DELETE"])
def remove_coupon():
    cart, totals = _service().remove_coupon(get_current_owner_id())
    return _respond(cart, totals, "Coupon removed")
