"""
Seed script -- populates the catalog and coupons with development data.

Run with:
    python -m shopcart.seed

Idempotent: products and coupons are upserted by id / code. Carts are
never touched.
"""

from datetime import timedelta
from decimal import Decimal

from shopcart.core.config import Config
from shopcart.core.dependencies import CartContext
from shopcart.models.coupon import Coupon, DiscountType
from shopcart.models.product import ProductSnapshot
from shopcart.utils.date_utils import DateUtils

PRODUCTS = [
    ProductSnapshot("CLO-TSHIRT-001", "Classic Cotton T-Shirt", Decimal("29.99"), 100),
    ProductSnapshot("ELEC-LAPTOP-001", "ProBook Laptop 15", Decimal("1299.99"), 25),
    ProductSnapshot("ELEC-PHONE-002", "SmartPhone X12", Decimal("799.99"), 50),
    ProductSnapshot("BOOK-PYFLASK-001", "Flask Web Development", Decimal("39.50"), 40),
    ProductSnapshot("HOME-MUG-003", "Ceramic Mug", Decimal("8.25"), 0, is_active=False),
]


def build_coupons():
    now = DateUtils.now_utc()
    return [
        Coupon("SAVE10", DiscountType.PERCENTAGE, Decimal("10"), now + timedelta(days=90)),
        Coupon("FIVEOFF", DiscountType.FIXED, Decimal("5.00")),
        Coupon("SUMMER24", DiscountType.PERCENTAGE, Decimal("20"), now - timedelta(days=1)),
    ]


def seed(context: CartContext) -> None:
    for product in PRODUCTS:
        context.catalog.add(product)
    print(f"  [+] {len(PRODUCTS)} products seeded")

    coupons = build_coupons()
    for coupon in coupons:
        context.coupons.add(coupon)
    print(f"  [+] {len(coupons)} coupons seeded")


def main() -> None:
    config = Config.from_env()
    config.validate()
    context = CartContext.from_config(config)
    try:
        print(f"Seeding {config.database.url}")
        seed(context)
    finally:
        context.close()


if __name__ == "__main__":
    main()
