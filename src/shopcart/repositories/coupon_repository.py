from decimal import Decimal
from dataclasses import replace
from typing import Dict, Iterable, Optional

from shopcart.models.coupon import Coupon, DiscountType
from shopcart.repositories.base import CouponLookup, SqlRepository
from shopcart.utils.date_utils import DateUtils
from shopcart.utils.validators import ValidationUtils


class CouponRepository(SqlRepository, CouponLookup):
    """Coupons backed by the coupons table"""

    def get(self, code: str) -> Optional[Coupon]:
        row = self.execute_single_query(
            """
            SELECT code, discount_type, value, expires_at
            FROM coupons
            WHERE code = :code
            """,
            {"code": ValidationUtils.normalize_coupon_code(code)},
        )
        if not row:
            return None
        return Coupon(
            code=row["code"],
            discount_type=DiscountType(row["discount_type"]),
            value=Decimal(row["value"]),
            expires_at=DateUtils.parse_datetime(row["expires_at"]),
        )

    def add(self, coupon: Coupon) -> Coupon:
        """Insert or replace a coupon"""
        params = {
            "code": ValidationUtils.normalize_coupon_code(coupon.code),
            "discount_type": DiscountType(coupon.discount_type).value,
            "value": str(coupon.value),
            "expires_at": (
                DateUtils.to_utc(coupon.expires_at).isoformat() if coupon.expires_at else None
            ),
        }
        with self.transaction() as conn:
            self.execute_command("DELETE FROM coupons WHERE code = :code", params, conn)
            self.execute_command(
                """
                INSERT INTO coupons (code, discount_type, value, expires_at)
                VALUES (:code, :discount_type, :value, :expires_at)
                """,
                params,
                conn,
            )
        return coupon


class InMemoryCoupons(CouponLookup):
    """Dictionary-backed coupons for tests and local runs"""

    def __init__(self, coupons: Iterable[Coupon] = ()):
        self._coupons: Dict[str, Coupon] = {}
        for coupon in coupons:
            self.add(coupon)

    def get(self, code: str) -> Optional[Coupon]:
        return self._coupons.get(ValidationUtils.normalize_coupon_code(code))

    def add(self, coupon: Coupon) -> Coupon:
        coupon = replace(coupon, code=ValidationUtils.normalize_coupon_code(coupon.code))
        self._coupons[coupon.code] = coupon
        return coupon
