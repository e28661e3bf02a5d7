from marshmallow import Schema, fields

from shopcart.utils.money_utils import MoneyUtils


class CartItemSchema(Schema):
    product_id = fields.Str(data_key="productId")
    name = fields.Str()
    quantity = fields.Int()
    unit_price = fields.Float(data_key="unitPrice")
    line_total = fields.Method("get_line_total", data_key="lineTotal")

    def get_line_total(self, item):
        return float(MoneyUtils.quantize(item.line_total))


class CartSchema(Schema):
    owner_id = fields.Str(data_key="ownerId")
    items = fields.List(fields.Nested(CartItemSchema))
    coupon_code = fields.Str(data_key="couponCode", allow_none=True)
    version = fields.Int()


class CartTotalsSchema(Schema):
    subtotal = fields.Float()
    discount = fields.Float()
    total = fields.Float()
    total_items = fields.Int(data_key="totalItems")


class ProductSchema(Schema):
    product_id = fields.Str(data_key="id")
    name = fields.Str()
    price = fields.Float()
    stock = fields.Int()
    is_active = fields.Bool(data_key="isActive")
    is_available = fields.Bool(data_key="isAvailable")


_cart_schema = CartSchema()
_totals_schema = CartTotalsSchema()


def _display_fields(cart, totals, currency: str) -> dict:
    return {
        "couponCode": cart.coupon_code,
        "currency": currency,
        "displayTotal": MoneyUtils.format_money(totals.total, currency),
    }


def dump_cart(cart, totals, currency: str) -> dict:
    """Cart fields and derived totals flattened into one response object."""
    data = _cart_schema.dump(cart)
    data.update(_totals_schema.dump(totals))
    data.update(_display_fields(cart, totals, currency))
    return data


def dump_summary(cart, totals, currency: str) -> dict:
    """Totals only, without item lines."""
    data = _totals_schema.dump(totals)
    data.update(_display_fields(cart, totals, currency))
    return data
