from sqlalchemy import (
    BigInteger, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Text, func
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    """
    A catalog entry.

    price_cents stores the price as an integer number of cents to avoid
    floating-point rounding errors. $19.99 -> 1999.
    """

    __tablename__ = "products"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    price_cents = Column(BigInteger, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_product_price"),
        CheckConstraint("stock >= 0", name="ck_product_stock"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r}>"


class Coupon(Base):
    """
    A named discount rule.

    value is kept as text so percentages like 12.5 survive exactly on
    every backend.
    """

    __tablename__ = "coupons"

    code = Column(Text, primary_key=True)
    discount_type = Column(Text, nullable=False)
    value = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "discount_type IN ('percentage', 'fixed')", name="ck_coupon_discount_type"
        ),
    )

    def __repr__(self) -> str:
        return f"<Coupon code={self.code!r} type={self.discount_type}>"


class Cart(Base):
    """
    One cart per owner.

    version is bumped on every save; a save that expects a different
    version is rejected (optimistic concurrency). The applied coupon's rule
    is snapshotted next to the code so totals never need a lookup.
    """

    __tablename__ = "carts"

    owner_id = Column(Text, primary_key=True)
    version = Column(Integer, nullable=False, default=1)
    coupon_code = Column(Text, nullable=True)
    coupon_type = Column(Text, nullable=True)
    coupon_value = Column(Text, nullable=True)
    coupon_expires_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    items = relationship(
        "CartItem", back_populates="cart", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Cart owner_id={self.owner_id!r} version={self.version}>"


class CartItem(Base):
    """
    quantity must be > 0 -- removing an item means deleting the row, not
    setting quantity to 0.

    unit_price is the exact Decimal snapshot as text, not cents, so a
    saved line loads back with the price it was added at.
    """

    __tablename__ = "cart_items"

    owner_id = Column(
        Text, ForeignKey("carts.owner_id", ondelete="CASCADE"), primary_key=True
    )
    product_id = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False)
    name = Column(Text, nullable=False, default="")
    unit_price = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity"),
    )

    cart = relationship("Cart", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<CartItem owner_id={self.owner_id!r} product_id={self.product_id!r} "
            f"qty={self.quantity}>"
        )
