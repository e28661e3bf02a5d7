from .cart_schemas import AddItemCommand, UpdateItemCommand, ApplyCouponCommand

__all__ = ["AddItemCommand", "UpdateItemCommand", "ApplyCouponCommand"]
