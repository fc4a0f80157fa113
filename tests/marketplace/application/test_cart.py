"""Application tests for cart commands."""

import json

import pytest
from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.management import ClearCart, SyncCart
from marketplace.errors import InsufficientStock, NotFound, ProductUnavailable
from marketplace.product.removal import WithdrawProduct
from protean.utils.globals import current_domain

BUYER = "buyer-001"


def _add(product_id, quantity=1, size=None, **extra):
    return current_domain.process(
        AddToCart(buyer_id=BUYER, product_id=product_id, quantity=quantity, size=size, **extra),
        asynchronous=False,
    )


def _cart():
    return current_domain.repository_for(Cart).for_buyer(BUYER)


class TestAddToCart:
    def test_creates_cart_on_first_add(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 3}])
        assert _cart() is None

        item_id = _add(product_id, quantity=2, size="S")

        cart = _cart()
        line = cart.line(item_id)
        assert line.quantity == 2
        assert line.size == "S"
        assert line.price == 250.0
        assert line.name == "Handwoven Basket"
        assert str(line.seller_id) == "seller-001"

    def test_unstocked_size_rejected(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 3}, {"size": "M", "quantity": 0}])

        with pytest.raises(InsufficientStock) as exc:
            _add(product_id, size="M")
        assert "Size: M" in exc.value.messages["stock"][0]
        assert _cart() is None

    def test_growing_a_line_past_stock_rejected(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 3}])
        item_id = _add(product_id, quantity=2, size="S")

        with pytest.raises(InsufficientStock):
            _add(product_id, quantity=2, size="S")
        assert _cart().line(item_id).quantity == 2

    def test_sized_product_without_size_uses_live_total(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 1}, {"size": "M", "quantity": 2}])

        item_id = _add(product_id, quantity=3)
        assert _cart().line(item_id).size is None

        with pytest.raises(InsufficientStock):
            _add(product_id, quantity=1)

    def test_unsized_product_checks_total_stock(self, list_product):
        product_id = list_product(total_stock=2)

        with pytest.raises(InsufficientStock):
            _add(product_id, quantity=3)
        _add(product_id, quantity=2)

    def test_withdrawn_product_unavailable(self, list_product):
        product_id = list_product(total_stock=2)
        current_domain.process(
            WithdrawProduct(actor_id="seller-001", actor_role="seller", product_id=product_id),
            asynchronous=False,
        )

        with pytest.raises(ProductUnavailable):
            _add(product_id)

    def test_unknown_product_unavailable(self):
        with pytest.raises(ProductUnavailable):
            _add("does-not-exist")

    def test_client_price_is_kept(self, list_product):
        product_id = list_product(total_stock=2)
        item_id = _add(product_id, price=199.0)
        assert _cart().line(item_id).price == 199.0


class TestChangeLines:
    def test_update_quantity_within_stock(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 3}])
        item_id = _add(product_id, size="S")

        current_domain.process(UpdateCartQuantity(buyer_id=BUYER, item_id=item_id, quantity=3), asynchronous=False)
        assert _cart().line(item_id).quantity == 3

        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartQuantity(buyer_id=BUYER, item_id=item_id, quantity=4), asynchronous=False
            )
        assert _cart().line(item_id).quantity == 3

    def test_update_without_cart_is_not_found(self):
        with pytest.raises(NotFound):
            current_domain.process(UpdateCartQuantity(buyer_id=BUYER, item_id="x", quantity=1), asynchronous=False)

    def test_remove_and_clear(self, list_product):
        first = list_product(total_stock=5)
        second = list_product(total_stock=5, name="Abaca Coaster")
        item_id = _add(first)
        _add(second)

        current_domain.process(RemoveFromCart(buyer_id=BUYER, item_id=item_id), asynchronous=False)
        assert [str(item.product_id) for item in _cart().items] == [second]

        current_domain.process(ClearCart(buyer_id=BUYER), asynchronous=False)
        assert _cart().items == []

    def test_clear_without_cart_is_a_no_op(self):
        current_domain.process(ClearCart(buyer_id=BUYER), asynchronous=False)
        assert _cart() is None


class TestSyncCart:
    def test_replaces_lines_and_drops_unavailable_products(self, list_product):
        kept = list_product(total_stock=5, price=120.0)
        withdrawn = list_product(total_stock=5, name="Abaca Coaster")
        current_domain.process(
            WithdrawProduct(actor_id="seller-001", actor_role="seller", product_id=withdrawn),
            asynchronous=False,
        )
        _add(kept, quantity=4)

        items = [
            {"product_id": kept, "quantity": 2, "size": "Huge"},
            {"product_id": withdrawn, "quantity": 1},
            {"product_id": "does-not-exist", "quantity": 1},
        ]
        current_domain.process(SyncCart(buyer_id=BUYER, items=json.dumps(items)), asynchronous=False)

        cart = _cart()
        assert len(cart.items) == 1
        line = cart.items[0]
        assert (str(line.product_id), line.quantity, line.size, line.price) == (kept, 2, None, 120.0)
