from typing import Dict, Iterable, List, Optional, Any

from shopcart.models.product import ProductSnapshot
from shopcart.repositories.base import CatalogLookup, SqlRepository
from shopcart.utils.money_utils import MoneyUtils
import logging

logger = logging.getLogger(__name__)


class ProductRepository(SqlRepository, CatalogLookup):
    """Catalog backed by the products table"""

    def get(self, product_id: str) -> Optional[ProductSnapshot]:
        row = self.execute_single_query(
            """
            SELECT id, name, price_cents, stock, is_active
            FROM products
            WHERE id = :product_id
            """,
            {"product_id": product_id},
        )
        return self._build_product(row) if row else None

    def list_products(self, active_only: bool = True, limit: int = 100) -> List[ProductSnapshot]:
        query = "SELECT id, name, price_cents, stock, is_active FROM products"
        if active_only:
            query += " WHERE is_active = :active"
        query += " ORDER BY name, id LIMIT :limit"
        rows = self.execute_query(query, {"active": True, "limit": limit})
        return [self._build_product(row) for row in rows]

    def add(self, product: ProductSnapshot) -> ProductSnapshot:
        """Insert or replace a catalog entry"""
        params = {
            "id": product.product_id,
            "name": product.name,
            "price_cents": MoneyUtils.to_cents(product.price),
            "stock": product.stock,
            "is_active": product.is_active,
        }
        with self.transaction() as conn:
            updated = self.execute_command(
                """
                UPDATE products
                SET name = :name, price_cents = :price_cents,
                    stock = :stock, is_active = :is_active
                WHERE id = :id
                """,
                params,
                conn,
            )
            if not updated:
                self.execute_command(
                    """
                    INSERT INTO products (id, name, price_cents, stock, is_active)
                    VALUES (:id, :name, :price_cents, :stock, :is_active)
                    """,
                    params,
                    conn,
                )
        logger.info(f"Saved product {product.product_id}")
        return product

    def _build_product(self, row: Dict[str, Any]) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=row["id"],
            name=row["name"],
            price=MoneyUtils.from_cents(row["price_cents"]),
            stock=int(row["stock"]),
            is_active=bool(row["is_active"]),
        )


class InMemoryCatalog(CatalogLookup):
    """Dictionary-backed catalog for tests and local runs"""

    def __init__(self, products: Iterable[ProductSnapshot] = ()):
        self._products: Dict[str, ProductSnapshot] = {p.product_id: p for p in products}

    def get(self, product_id: str) -> Optional[ProductSnapshot]:
        return self._products.get(product_id)

    def list_products(self, active_only: bool = True, limit: int = 100) -> List[ProductSnapshot]:
        products = sorted(self._products.values(), key=lambda p: (p.name, p.product_id))
        if active_only:
            products = [p for p in products if p.is_active]
        return products[:limit]

    def add(self, product: ProductSnapshot) -> ProductSnapshot:
        self._products[product.product_id] = product
        return product
