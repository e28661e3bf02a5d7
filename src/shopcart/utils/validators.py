import re
from typing import Any


class ValidationUtils:
    """
    Validation helpers shared by the cart engine and the request schemas
    """

    PATTERNS = {
        'coupon_code': re.compile(r'^[A-Z0-9][A-Z0-9_\-]{1,31}$'),  # 2-32 chars
        'identifier': re.compile(r'^[A-Za-z0-9][A-Za-z0-9_\-]{0,63}$'),
    }

    @classmethod
    def is_integer(cls, value: Any) -> bool:
        """int but not bool (True would otherwise count as quantity 1)"""
        return isinstance(value, int) and not isinstance(value, bool)

    @classmethod
    def is_positive_quantity(cls, value: Any) -> bool:
        return cls.is_integer(value) and value >= 1

    @classmethod
    def is_non_negative_quantity(cls, value: Any) -> bool:
        return cls.is_integer(value) and value >= 0

    @classmethod
    def normalize_coupon_code(cls, code: str) -> str:
        """Coupon codes are case-insensitive; stored upper case without padding"""
        return (code or "").strip().upper()

    @classmethod
    def validate_coupon_code(cls, code: str) -> bool:
        return bool(cls.PATTERNS['coupon_code'].match(cls.normalize_coupon_code(code)))

    @classmethod
    def validate_identifier(cls, value: str) -> bool:
        return bool(value) and bool(cls.PATTERNS['identifier'].match(value))
