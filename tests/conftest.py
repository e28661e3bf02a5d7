from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shopcart.app import create_app
from shopcart.core.config import Config, DatabaseConfig
from shopcart.core.dependencies import CartContext
from shopcart.db import make_engine, init_db
from shopcart.models.cart import Cart
from shopcart.models.coupon import Coupon, DiscountType
from shopcart.models.product import ProductSnapshot
from shopcart.repositories.coupon_repository import InMemoryCoupons
from shopcart.repositories.product_repository import InMemoryCatalog
from shopcart.services.cart_engine import CartEngine

FIXED_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


# ==================== Domain Fixtures ====================

@pytest.fixture
def products():
    return [
        ProductSnapshot("P1", "Test Product", Decimal("29.99"), stock=100),
        ProductSnapshot("P2", "Mug", Decimal("8.25"), stock=6),
        ProductSnapshot("P3", "Third", Decimal("0.10"), stock=1000),
        ProductSnapshot("OLD", "Retired Product", Decimal("5.00"), stock=10, is_active=False),
    ]


@pytest.fixture
def catalog(products) -> InMemoryCatalog:
    return InMemoryCatalog(products)


@pytest.fixture
def coupons() -> InMemoryCoupons:
    return InMemoryCoupons([
        Coupon("SAVE10", DiscountType.PERCENTAGE, Decimal("10"), FIXED_NOW + timedelta(days=30)),
        Coupon("FIVEOFF", DiscountType.FIXED, Decimal("5.00")),
        Coupon("BIGFIXED", DiscountType.FIXED, Decimal("1000.00")),
        Coupon("EXPIRED", DiscountType.PERCENTAGE, Decimal("50"), FIXED_NOW - timedelta(seconds=1)),
    ])


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def engine() -> CartEngine:
    """Engine with a frozen clock so coupon expiry is deterministic."""
    return CartEngine(clock=lambda: FIXED_NOW)


@pytest.fixture
def cart() -> Cart:
    return Cart(owner_id="user-1")


# ==================== Infrastructure Fixtures ====================

@pytest.fixture
def config() -> Config:
    return Config(database=DatabaseConfig(url="sqlite://"))


@pytest.fixture
def db_engine(config):
    """Fresh in-memory SQLite database with all tables created."""
    sql_engine = make_engine(config.database)
    init_db(sql_engine)
    yield sql_engine
    sql_engine.dispose()


@pytest.fixture
def context(config, catalog, coupons, engine) -> CartContext:
    ctx = CartContext.in_memory(config, catalog=catalog, coupons=coupons)
    ctx.engine = engine
    return ctx


@pytest.fixture
def app(context):
    flask_app = create_app(context=context)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def test_client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"X-User-Id": "user-1"}
