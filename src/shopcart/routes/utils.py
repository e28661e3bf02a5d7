from typing import Any, Optional, Type, TypeVar

from flask import current_app, jsonify, request
from datetime import datetime, timezone
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shopcart.core.dependencies import CartContext
from shopcart.core.exceptions import InvalidQuantity, UnauthorizedError, ValidationError
from shopcart.utils.validators import ValidationUtils

CommandT = TypeVar("CommandT", bound=BaseModel)

EXTENSION_KEY = "shopcart"


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def get_context() -> CartContext:
    return current_app.extensions[EXTENSION_KEY]


def parse_int(
    v,
    default: int,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
    field_name: str = "value",
) -> int:
    """Parse an integer query parameter with optional range validation."""
    if v is None:
        return default
    try:
        result = int(v)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}: must be a valid integer")
    if min_val is not None and result < min_val:
        raise ValidationError(f"{field_name} must be at least {min_val}")
    if max_val is not None and result > max_val:
        raise ValidationError(f"{field_name} cannot exceed {max_val}")
    return result


def parse_bool(v, default: bool = False) -> bool:
    """Parse a boolean value from a query string."""
    if v is None:
        return default
    return str(v).lower() in ("1", "true", "t", "yes", "y", "on")


def get_current_owner_id() -> str:
    """Extract and validate the cart owner from the X-User-Id request header."""
    uid = (request.headers.get("X-User-Id") or "").strip()
    if not uid:
        raise UnauthorizedError("Missing X-User-Id header.")
    if not ValidationUtils.validate_identifier(uid):
        raise UnauthorizedError("Invalid X-User-Id header.")
    return uid


def parse_command(command_class: Type[CommandT], data: Any = None) -> CommandT:
    """Validate a JSON body into a typed command before it reaches the service."""
    if data is None:
        data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    try:
        return command_class.model_validate(data)
    except PydanticValidationError as err:
        field_errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in err.errors()
        ]
        # A bad quantity alone is reported as the domain error clients expect
        if all(item["field"] == "quantity" for item in field_errors):
            raise InvalidQuantity(data.get("quantity"), field_errors[0]["message"])
        raise ValidationError("Validation failed", field_errors)
