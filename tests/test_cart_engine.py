"""
Unit tests for CartEngine

The engine is pure, so every test works on an in-memory Cart with
in-memory catalog and coupon lookups. No database, no Flask.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from shopcart.core.exceptions import (
    InvalidQuantity, ProductNotFound, InsufficientStock, ItemNotFound, InvalidCoupon
)
from shopcart.models.cart import Cart, CartItem
from shopcart.models.product import ProductSnapshot
from shopcart.repositories.product_repository import InMemoryCatalog


class TestAddItem:

    def test_add_to_empty_cart_snapshots_price(self, engine, cart, catalog):
        # Act
        engine.add_item(cart, "P1", 2, catalog)
        totals = engine.compute_totals(cart)

        # Assert
        assert len(cart.items) == 1
        assert cart.items[0].unit_price == Decimal("29.99")
        assert cart.items[0].name == "Test Product"
        assert totals.subtotal == Decimal("59.98")
        assert totals.discount == Decimal("0")
        assert totals.total == Decimal("59.98")
        assert totals.total_items == 2

    def test_adding_same_product_merges_quantity(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 2, catalog)
        engine.add_item(cart, "P1", 3, catalog)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_items_keep_insertion_order(self, engine, cart, catalog):
        engine.add_item(cart, "P2", 1, catalog)
        engine.add_item(cart, "P1", 1, catalog)
        engine.add_item(cart, "P2", 1, catalog)

        assert [item.product_id for item in cart.items] == ["P2", "P1"]

    def test_merge_exceeding_stock_fails_and_leaves_cart_unchanged(self, engine, catalog):
        """P1 x2 in cart, stock 6, adding 5 more would make 7."""
        cart = Cart("user-1", items=[CartItem("P1", 2, Decimal("29.99"))])
        low_stock = InMemoryCatalog([ProductSnapshot("P1", "Test Product", Decimal("29.99"), stock=6)])

        with pytest.raises(InsufficientStock) as exc_info:
            engine.add_item(cart, "P1", 5, low_stock)

        assert exc_info.value.available_stock == 6
        assert exc_info.value.in_cart == 2
        assert exc_info.value.details["requested"] == 7
        assert cart.items == [CartItem("P1", 2, Decimal("29.99"))]

    def test_new_item_exceeding_stock_fails(self, engine, cart, catalog):
        with pytest.raises(InsufficientStock) as exc_info:
            engine.add_item(cart, "P2", 7, catalog)

        assert exc_info.value.in_cart == 0
        assert cart.items == []

    def test_quantity_equal_to_stock_is_allowed(self, engine, cart, catalog):
        engine.add_item(cart, "P2", 6, catalog)
        assert cart.items[0].quantity == 6

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    def test_invalid_quantity_rejected(self, engine, cart, catalog, quantity):
        with pytest.raises(InvalidQuantity):
            engine.add_item(cart, "P1", quantity, catalog)
        assert cart.items == []

    def test_unknown_product_rejected(self, engine, cart, catalog):
        with pytest.raises(ProductNotFound):
            engine.add_item(cart, "NOPE", 1, catalog)

    def test_inactive_product_rejected(self, engine, cart, catalog):
        with pytest.raises(ProductNotFound):
            engine.add_item(cart, "OLD", 1, catalog)

    def test_unit_price_not_refreshed_when_catalog_changes(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        catalog.add(ProductSnapshot("P1", "Test Product", Decimal("35.00"), stock=100))

        engine.add_item(cart, "P1", 1, catalog)

        assert cart.items[0].unit_price == Decimal("29.99")
        assert cart.items[0].quantity == 2


class TestUpdateItemQuantity:

    def test_update_sets_quantity(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        engine.update_item_quantity(cart, "P1", 4, catalog)

        assert cart.items[0].quantity == 4

    def test_update_to_zero_removes_item(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 3, catalog)

        engine.update_item_quantity(cart, "P1", 0, catalog)
        totals = engine.compute_totals(cart)

        assert cart.items == []
        assert totals.total == 0
        assert totals.total_items == 0

    def test_update_to_zero_matches_remove(self, engine, catalog):
        updated = Cart("a", items=[CartItem("P1", 3, Decimal("29.99")), CartItem("P2", 1, Decimal("8.25"))])
        removed = Cart("a", items=[CartItem("P1", 3, Decimal("29.99")), CartItem("P2", 1, Decimal("8.25"))])

        engine.update_item_quantity(updated, "P1", 0, catalog)
        engine.remove_item(removed, "P1")

        assert updated == removed

    def test_update_above_stock_fails(self, engine, cart, catalog):
        engine.add_item(cart, "P2", 1, catalog)

        with pytest.raises(InsufficientStock) as exc_info:
            engine.update_item_quantity(cart, "P2", 7, catalog)

        assert exc_info.value.available_stock == 6
        assert cart.items[0].quantity == 1

    def test_update_missing_item_fails(self, engine, cart, catalog):
        with pytest.raises(ItemNotFound):
            engine.update_item_quantity(cart, "P1", 1, catalog)

    def test_update_missing_item_with_zero_fails(self, engine, cart, catalog):
        with pytest.raises(ItemNotFound):
            engine.update_item_quantity(cart, "P1", 0, catalog)

    def test_negative_quantity_rejected(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        with pytest.raises(InvalidQuantity):
            engine.update_item_quantity(cart, "P1", -1, catalog)

    def test_update_after_product_deactivated_fails(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        catalog.add(ProductSnapshot("P1", "Test Product", Decimal("29.99"), stock=100, is_active=False))

        with pytest.raises(ProductNotFound):
            engine.update_item_quantity(cart, "P1", 2, catalog)

    def test_update_keeps_unit_price(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        catalog.add(ProductSnapshot("P1", "Test Product", Decimal("1.00"), stock=100))

        engine.update_item_quantity(cart, "P1", 3, catalog)

        assert cart.items[0].unit_price == Decimal("29.99")


class TestRemoveAndClear:

    def test_remove_item(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 1, catalog)
        engine.add_item(cart, "P2", 2, catalog)

        engine.remove_item(cart, "P1")

        assert [item.product_id for item in cart.items] == ["P2"]

    def test_remove_missing_item_fails(self, engine, cart):
        with pytest.raises(ItemNotFound):
            engine.remove_item(cart, "P1")

    def test_clear_empties_items_and_coupon(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 1, catalog)
        engine.apply_coupon(cart, "SAVE10", coupons)

        engine.clear(cart)

        assert cart.items == []
        assert cart.coupon_code is None
        assert cart.owner_id == "user-1"

    def test_clear_on_empty_cart_succeeds(self, engine, cart):
        assert engine.clear(cart).is_empty


class TestCoupons:

    def test_apply_percentage_coupon(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 2, catalog)

        engine.apply_coupon(cart, "save10", coupons)
        totals = engine.compute_totals(cart)

        assert cart.coupon_code == "SAVE10"
        assert totals.subtotal == Decimal("59.98")
        assert totals.discount == Decimal("6.00")
        assert totals.total == Decimal("53.98")

    def test_apply_fixed_coupon(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 1, catalog)

        engine.apply_coupon(cart, "FIVEOFF", coupons)
        totals = engine.compute_totals(cart)

        assert totals.discount == Decimal("5.00")
        assert totals.total == Decimal("24.99")

    def test_fixed_discount_clamped_to_subtotal(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 1, catalog)

        engine.apply_coupon(cart, "BIGFIXED", coupons)
        totals = engine.compute_totals(cart)

        assert totals.discount == Decimal("29.99")
        assert totals.total == Decimal("0.00")

    def test_new_coupon_replaces_previous(self, engine, cart, coupons):
        engine.apply_coupon(cart, "SAVE10", coupons)
        engine.apply_coupon(cart, "FIVEOFF", coupons)

        assert cart.coupon_code == "FIVEOFF"

    def test_unknown_coupon_rejected(self, engine, cart, coupons):
        with pytest.raises(InvalidCoupon) as exc_info:
            engine.apply_coupon(cart, "NOPE", coupons)
        assert exc_info.value.details["reason"] == "unknown"
        assert cart.coupon is None

    def test_expired_coupon_rejected(self, engine, cart, coupons):
        with pytest.raises(InvalidCoupon) as exc_info:
            engine.apply_coupon(cart, "EXPIRED", coupons)
        assert exc_info.value.details["reason"] == "expired"

    def test_failed_apply_keeps_existing_coupon(self, engine, cart, coupons):
        engine.apply_coupon(cart, "SAVE10", coupons)
        with pytest.raises(InvalidCoupon):
            engine.apply_coupon(cart, "EXPIRED", coupons)
        assert cart.coupon_code == "SAVE10"

    def test_expiry_checked_against_explicit_now(self, engine, cart, coupons, fixed_now):
        engine.apply_coupon(cart, "EXPIRED", coupons, now=fixed_now - timedelta(days=1))
        assert cart.coupon_code == "EXPIRED"

    def test_apply_then_remove_restores_subtotal(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 3, catalog)
        engine.apply_coupon(cart, "SAVE10", coupons)

        engine.remove_coupon(cart)
        totals = engine.compute_totals(cart)

        assert totals.discount == 0
        assert totals.total == totals.subtotal

    def test_remove_coupon_is_idempotent(self, engine, cart):
        engine.remove_coupon(cart)
        engine.remove_coupon(cart)
        assert cart.coupon_code is None


class TestComputeTotals:

    def test_empty_cart_totals(self, engine, cart):
        totals = engine.compute_totals(cart)

        assert totals.subtotal == 0
        assert totals.total == 0
        assert totals.total_items == 0

    def test_rounding_applied_once_to_the_sum(self, engine):
        """
        Three lines of 0.005 each: rounding per line would give 0.03,
        rounding the sum gives 0.02 (0.015 -> 0.02 half-up).
        """
        cart = Cart("u", items=[
            CartItem("A", 1, Decimal("0.005")),
            CartItem("B", 1, Decimal("0.005")),
            CartItem("C", 1, Decimal("0.005")),
        ])

        assert engine.compute_totals(cart).subtotal == Decimal("0.02")

    def test_round_half_up(self, engine):
        cart = Cart("u", items=[CartItem("A", 1, Decimal("0.125"))])
        assert engine.compute_totals(cart).subtotal == Decimal("0.13")

    def test_percentage_discount_rounded_half_up(self, engine, coupons):
        cart = Cart("u", items=[CartItem("A", 1, Decimal("0.05"))])
        cart.coupon = coupons.get("SAVE10")

        totals = engine.compute_totals(cart)

        assert totals.discount == Decimal("0.01")  # 0.005 -> 0.01
        assert totals.total == Decimal("0.04")

    def test_total_items_counts_units(self, engine, cart, catalog):
        engine.add_item(cart, "P1", 2, catalog)
        engine.add_item(cart, "P3", 5, catalog)
        engine.add_item(cart, "P1", 1, catalog)
        engine.remove_item(cart, "P3")

        assert engine.compute_totals(cart).total_items == 3

    def test_compute_totals_is_pure(self, engine, cart, catalog, coupons):
        engine.add_item(cart, "P1", 2, catalog)
        engine.add_item(cart, "P3", 7, catalog)
        engine.apply_coupon(cart, "SAVE10", coupons)
        snapshot = Cart(cart.owner_id, [CartItem(i.product_id, i.quantity, i.unit_price, i.name) for i in cart.items], cart.coupon)

        first = engine.compute_totals(cart)
        second = engine.compute_totals(cart)

        assert first == second
        assert cart == snapshot

    def test_add_sequence_total_items_property(self, engine, cart, catalog):
        added = 0
        for product_id, quantity in [("P1", 1), ("P3", 10), ("P1", 4), ("P2", 2), ("P3", 1)]:
            engine.add_item(cart, product_id, quantity, catalog)
            added += quantity

        assert engine.compute_totals(cart).total_items == added
        assert len({item.product_id for item in cart.items}) == len(cart.items)
