from typing import Optional, Dict, Any, List


class BaseAPIException(Exception):
    def __init__( self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseAPIException):
    """Raised when request validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class UnauthorizedError(BaseAPIException):
    """Raised when the cart owner cannot be identified"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401, "UNAUTHORIZED")


class InvalidQuantity(BaseAPIException):
    """Raised when a quantity is not an integer in the allowed range"""

    def __init__(self, quantity: Any, message: str = "Quantity must be a positive integer"):
        super().__init__(message, 400, "INVALID_QUANTITY", {"quantity": quantity})


class ProductNotFound(BaseAPIException):
    """Raised when a product is missing from the catalog or inactive"""

    def __init__(self, product_id: str):
        super().__init__(
            "Product not found or unavailable",
            404,
            "PRODUCT_NOT_FOUND",
            {"product_id": product_id}
        )


class ItemNotFound(BaseAPIException):
    """Raised when a product is not present in the cart"""

    def __init__(self, product_id: str):
        super().__init__(
            "Item not found in cart",
            404,
            "ITEM_NOT_FOUND",
            {"product_id": product_id}
        )


class InsufficientStock(BaseAPIException):
    """Raised when the requested quantity exceeds available stock"""

    def __init__(self, product_id: str, requested: int, available_stock: int, in_cart: int = 0):
        message = "Insufficient stock available"
        if in_cart:
            message = "Requested quantity exceeds available stock"
        details = {
            "product_id": product_id,
            "requested": requested,
            "available_stock": available_stock,
            "in_cart": in_cart,
        }
        super().__init__(message, 409, "INSUFFICIENT_STOCK", details)
        self.product_id = product_id
        self.requested = requested
        self.available_stock = available_stock
        self.in_cart = in_cart


class InvalidCoupon(BaseAPIException):
    """Raised when a coupon code is unknown or expired"""

    def __init__(self, code: str, reason: str = "unknown"):
        super().__init__(
            "Coupon code is invalid or expired",
            422,
            "INVALID_COUPON",
            {"code": code, "reason": reason}
        )


class Conflict(BaseAPIException):
    """Raised when a cart was modified concurrently since it was loaded"""

    def __init__(self, owner_id: str, expected_version: Optional[int] = None):
        details = {"owner_id": owner_id}
        if expected_version is not None:
            details["expected_version"] = expected_version
        super().__init__(
            "Cart was modified by another request. Please retry.",
            409,
            "CONFLICT",
            details
        )


class DatabaseError(BaseAPIException):
    """Raised when database operations fail"""

    def __init__(self, message: str = "Database operation failed", operation: Optional[str] = None):
        # Don't expose internal database details to users
        user_message = "An internal error occurred. Please try again later."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "DATABASE_ERROR",
            details,
            internal_message=message  # Keep original message for logging
        )
