from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class DiscountType(str, Enum):
    """How a coupon's value is applied to the subtotal"""
    PERCENTAGE = "percentage"  # value is percent points: 10 -> 10% off
    FIXED = "fixed"            # value is a currency amount


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_type: DiscountType
    value: Decimal
    expires_at: Optional[datetime] = None
