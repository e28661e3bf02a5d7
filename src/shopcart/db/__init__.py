from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from shopcart.core.config import DatabaseConfig
from shopcart.db.tables import Base

__all__ = ["Base", "make_engine", "init_db"]


def make_engine(config: DatabaseConfig) -> Engine:
    """
    Build the engine for a database config.

    SQLite gets no pool sizing; an in-memory SQLite URL is pinned to a
    single shared connection so every repository sees the same database.
    """
    if config.url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if config.url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(config.url, echo=config.echo, **kwargs)

    return create_engine(
        config.url,
        echo=config.echo,
        pool_size=config.pool_size,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
    )


def init_db(engine: Engine) -> None:
    """Create all tables that don't exist yet"""
    Base.metadata.create_all(engine)
