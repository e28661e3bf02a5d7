from flask import Blueprint, request

from shopcart.core.exceptions import ProductNotFound
from shopcart.routes.schemas import ProductSchema
from shopcart.routes.utils import get_context, parse_bool, parse_int, success_response

products_bp = Blueprint("products", __name__)

_product_schema = ProductSchema()


@products_bp.route("", methods=["GET"])
def list_products():
    """Read-only catalog listing."""
    limit = parse_int(request.args.get("limit"), 50, min_val=1, max_val=100, field_name="limit")
    active_only = not parse_bool(request.args.get("include_inactive"))
    products = get_context().catalog.list_products(active_only=active_only, limit=limit)
    return success_response(_product_schema.dump(products, many=True))


@products_bp.route("/<product_id>", methods=["GET"])
def get_product(product_id: str):
    product = get_context().catalog.get(product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return success_response(_product_schema.dump(product))
