from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only view of a catalog entry as the cart sees it"""
    product_id: str
    name: str
    price: Decimal
    stock: int
    is_active: bool = True

    @property
    def is_available(self) -> bool:
        return self.is_active and self.stock > 0
