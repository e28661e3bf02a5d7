import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


@dataclass
class DatabaseConfig:
    """Database configuration settings"""
    url: str = "sqlite:///shopcart.db"
    pool_size: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600
    echo: bool = False  # Log SQL queries


@dataclass
class CartConfig:
    """Cart business limits"""
    max_save_attempts: int = 3
    max_quantity_per_item: int = 99
    currency: str = "USD"


@dataclass
class AppConfig:
    """Application configuration"""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cart: CartConfig = field(default_factory=CartConfig)
    app: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Config":
        """Build configuration from the process environment (and .env)"""
        if dotenv:
            load_dotenv()

        environment = os.getenv("ENVIRONMENT", "development")
        return cls(
            database=DatabaseConfig(
                url=os.getenv("DATABASE_URL", "sqlite:///shopcart.db"),
                pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
                pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
                pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
                echo=_env_bool("DB_ECHO"),
            ),
            cart=CartConfig(
                max_save_attempts=int(os.getenv("CART_MAX_SAVE_ATTEMPTS", "3")),
                max_quantity_per_item=int(os.getenv("CART_MAX_QUANTITY_PER_ITEM", "99")),
                currency=os.getenv("CURRENCY", "USD").strip().upper(),
            ),
            app=AppConfig(
                debug=_env_bool("DEBUG"),
                host=os.getenv("HOST", "0.0.0.0"),
                port=int(os.getenv("PORT", "5000")),
                environment=environment,
                log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            ),
        )

    @property
    def is_development(self) -> bool:
        return self.app.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.app.environment == "production"

    def validate(self) -> None:
        """Validate critical configuration"""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.cart.max_save_attempts < 1:
            raise ValueError("CART_MAX_SAVE_ATTEMPTS must be at least 1")

        if self.cart.max_quantity_per_item < 1:
            raise ValueError("CART_MAX_QUANTITY_PER_ITEM must be at least 1")

        if len(self.cart.currency) != 3:
            raise ValueError("Invalid currency code: expected ISO4217 length 3")

        if self.app.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {self.app.log_level}")

        if self.is_production and self.app.debug:
            raise ValueError("DEBUG must be disabled in production")
