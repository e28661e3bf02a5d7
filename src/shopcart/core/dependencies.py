from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine

from shopcart.core.config import Config
from shopcart.db import make_engine, init_db
from shopcart.repositories.base import CartRepository, CatalogLookup, CouponLookup
from shopcart.repositories.cart_repository import SqlCartRepository, InMemoryCartRepository
from shopcart.repositories.coupon_repository import CouponRepository, InMemoryCoupons
from shopcart.repositories.product_repository import ProductRepository, InMemoryCatalog
from shopcart.services.cart_engine import CartEngine


@dataclass
class CartContext:
    """
    Everything a request needs, constructed once and passed explicitly.

    The Flask app keeps one of these in app.extensions; tests build their
    own with in-memory repositories.
    """
    config: Config
    carts: CartRepository
    catalog: CatalogLookup
    coupons: CouponLookup
    engine: CartEngine = field(default_factory=CartEngine)
    db_engine: Optional[Engine] = None

    @classmethod
    def from_config(cls, config: Config, create_tables: bool = True) -> "CartContext":
        """SQL-backed context for a configured database"""
        db_engine = make_engine(config.database)
        if create_tables:
            init_db(db_engine)
        return cls(
            config=config,
            carts=SqlCartRepository(db_engine),
            catalog=ProductRepository(db_engine),
            coupons=CouponRepository(db_engine),
            db_engine=db_engine,
        )

    @classmethod
    def in_memory(
        cls,
        config: Optional[Config] = None,
        catalog: Optional[InMemoryCatalog] = None,
        coupons: Optional[InMemoryCoupons] = None
    ) -> "CartContext":
        return cls(
            config=config or Config(),
            carts=InMemoryCartRepository(),
            catalog=catalog or InMemoryCatalog(),
            coupons=coupons or InMemoryCoupons(),
        )

    def close(self) -> None:
        if self.db_engine is not None:
            self.db_engine.dispose()
