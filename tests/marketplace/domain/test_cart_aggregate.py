"""Tests for the Cart aggregate: line merging, resizing, removal and sync."""

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.events import CartCleared, CartItemAdded, CartQuantityUpdated, CartSynced
from marketplace.errors import NotFound


def _cart_with_line(**overrides):
    cart = Cart.create("buyer-001")
    line = {"product_id": "prod-001", "quantity": 1, "size": "M", "price": 250.0, "name": "Clay Vase"}
    line.update(overrides)
    item_id = cart.add_item(**line)
    return cart, item_id


class TestAddItem:
    def test_new_line(self):
        cart, item_id = _cart_with_line(quantity=2)

        assert len(cart.items) == 1
        assert cart.line(item_id).quantity == 2
        assert cart.total_amount == 500.0
        event = cart._events[-1]
        assert isinstance(event, CartItemAdded)
        assert event.quantity == 2

    def test_same_product_and_size_grows_existing_line(self):
        cart, item_id = _cart_with_line()
        again = cart.add_item(product_id="prod-001", quantity=3, size="M", price=250.0)

        assert again == item_id
        assert len(cart.items) == 1
        assert cart.line(item_id).quantity == 4

    def test_other_size_or_variation_is_a_separate_line(self):
        cart, _ = _cart_with_line()
        cart.add_item(product_id="prod-001", quantity=1, size="L", price=250.0)
        cart.add_item(product_id="prod-001", quantity=1, size="M", variation_name="Colour", variation_value="Red")

        assert len(cart.items) == 3


class TestLineChanges:
    def test_update_quantity(self):
        cart, item_id = _cart_with_line()
        cart.update_item_quantity(item_id, 5)

        assert cart.line(item_id).quantity == 5
        event = cart._events[-1]
        assert isinstance(event, CartQuantityUpdated)
        assert (event.previous_quantity, event.new_quantity) == (1, 5)

    def test_unknown_line_is_not_found(self):
        cart, _ = _cart_with_line()
        with pytest.raises(NotFound):
            cart.update_item_quantity("missing", 2)
        with pytest.raises(NotFound):
            cart.remove_item("missing")

    def test_remove_line(self):
        cart, item_id = _cart_with_line()
        cart.add_item(product_id="prod-002", quantity=1, price=10.0)
        cart.remove_item(item_id)

        assert [str(item.product_id) for item in cart.items] == ["prod-002"]

    def test_clear(self):
        cart, _ = _cart_with_line()
        cart.add_item(product_id="prod-002", quantity=1, price=10.0)
        cart.clear()

        assert cart.items == []
        assert cart.total_amount == 0
        assert cart._events[-1].items_removed == 2


class TestReplaceItems:
    def test_replaces_every_line(self):
        cart, _ = _cart_with_line()
        cart.replace_items([{"product_id": "prod-009", "quantity": 2, "price": 40.0}], dropped=1)

        assert [str(item.product_id) for item in cart.items] == ["prod-009"]
        assert cart.total_amount == 80.0
        event = cart._events[-1]
        assert isinstance(event, CartSynced)
        assert (event.items_kept, event.items_dropped) == (1, 1)

    def test_cleared_event(self):
        cart = Cart.create("buyer-001")
        cart.clear()
        assert isinstance(cart._events[-1], CartCleared)
