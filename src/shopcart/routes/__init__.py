from shopcart.routes.cart import cart_bp
from shopcart.routes.products import products_bp

__all__ = ["products_bp", "cart_bp"]
