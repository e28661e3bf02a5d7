from .cart_engine import CartEngine

__all__ = ["CartEngine"]
