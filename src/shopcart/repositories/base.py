from abc import ABC, abstractmethod
from typing import Optional, List, Any, Dict
from contextlib import contextmanager
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from shopcart.core.exceptions import DatabaseError
from shopcart.models.cart import Cart
from shopcart.models.coupon import Coupon
from shopcart.models.product import ProductSnapshot
import logging

logger = logging.getLogger(__name__)


class CatalogLookup(ABC):
    """Read-only product source used by the cart engine"""

    @abstractmethod
    def get(self, product_id: str) -> Optional[ProductSnapshot]:
        """Return the product snapshot or None if it doesn't exist"""
        pass

    @abstractmethod
    def list_products(self, active_only: bool = True, limit: int = 100) -> List[ProductSnapshot]:
        """Catalog listing ordered by name"""
        pass


class CouponLookup(ABC):
    """Read-only coupon source used by the cart engine"""

    @abstractmethod
    def get(self, code: str) -> Optional[Coupon]:
        """Return the coupon for a normalized code or None"""
        pass


class CartRepository(ABC):
    """
    Cart persistence with optimistic concurrency

    load() never fails for a missing cart: it returns an empty cart with
    version 0. save() must raise Conflict when the stored version no longer
    matches cart.version, and returns the cart with its new version.
    """

    @abstractmethod
    def load(self, owner_id: str) -> Cart:
        pass

    @abstractmethod
    def save(self, cart: Cart) -> Cart:
        pass


class SqlRepository:
    """
    Common SQL plumbing on top of an injected SQLAlchemy engine.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def transaction(self):
        """Connection inside BEGIN ... COMMIT, rolled back on any error"""
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"Database transaction error: {str(e)}")
            raise DatabaseError(f"Database transaction failed: {str(e)}", "TRANSACTION")

    def execute_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        conn: Optional[Connection] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Raises:
            DatabaseError: When query execution fails
        """
        try:
            if conn is not None:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
            with self.engine.connect() as own_conn:
                result = own_conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {query}, Error: {str(e)}")
            raise DatabaseError("Query execution failed", "SELECT")

    def execute_single_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        conn: Optional[Connection] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Execute query expecting single result

        Returns:
            Single row dictionary or None if not found
        """
        rows = self.execute_query(query, params, conn)
        return rows[0] if rows else None

    def execute_command(
        self,
        command: str,
        params: Optional[Any] = None,
        conn: Optional[Connection] = None
    ) -> int:
        """
        Execute INSERT/UPDATE/DELETE command. A list of parameter dicts runs
        as executemany.

        Returns:
            Number of affected rows
        """
        try:
            if conn is not None:
                return conn.execute(text(command), params or {}).rowcount
            with self.engine.begin() as own_conn:
                return own_conn.execute(text(command), params or {}).rowcount
        except SQLAlchemyError as e:
            logger.error(f"Command execution failed: {command}, Error: {str(e)}")
            raise DatabaseError("Command execution failed", "WRITE")
