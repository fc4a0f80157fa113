"""Application tests for order status updates."""

import pytest
from marketplace.errors import Forbidden, InvalidStatus, NotFound, OrderClosed
from marketplace.order.order import Order
from marketplace.order.placement import place_order
from marketplace.order.status import UpdateOrderStatus
from protean.utils.globals import current_domain

BUYER = "buyer-001"
SELLER = "seller-001"


@pytest.fixture()
def order_id(list_product):
    product_id = list_product(seller_id=SELLER, total_stock=5)
    return place_order(BUYER, [{"product_id": product_id, "quantity": 1}]).id


def _update(order_id, actor_id, actor_role, status, note=None):
    current_domain.process(
        UpdateOrderStatus(
            order_id=order_id,
            actor_id=actor_id,
            actor_role=actor_role,
            status=status,
            note=note,
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(Order).get(order_id)


class TestSellerAndAdminUpdates:
    def test_seller_moves_order_along(self, order_id):
        order = _update(order_id, SELLER, "seller", "processing")
        assert order.status == "processing"
        assert order.history()[-1].note == "Order status updated to processing"

    def test_admin_may_set_any_status(self, order_id):
        order = _update(order_id, "admin-001", "admin", "out for delivery", note="Courier picked up")
        assert order.status == "out for delivery"
        assert order.history()[-1].note == "Courier picked up"

    def test_seller_may_jump_straight_to_delivered(self, order_id):
        order = _update(order_id, SELLER, "seller", "delivered")
        assert order.status == "delivered"
        assert order.delivered_at is not None

    def test_seller_of_another_order_is_forbidden(self, order_id):
        with pytest.raises(Forbidden):
            _update(order_id, "seller-999", "seller", "processing")


class TestBuyerUpdates:
    def test_buyer_skipping_to_delivered_is_forbidden(self, order_id):
        with pytest.raises(Forbidden):
            _update(order_id, BUYER, "client", "delivered")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "order placed"
        assert len(order.history()) == 1

    def test_buyer_confirms_delivery(self, order_id):
        _update(order_id, SELLER, "seller", "out for delivery")
        order = _update(order_id, BUYER, "client", "delivered")

        assert order.status == "delivered"
        assert order.delivered_at is not None
        assert [h.status for h in order.history()] == ["order placed", "out for delivery", "delivered"]

    def test_buyer_cannot_cancel(self, order_id):
        _update(order_id, SELLER, "seller", "out for delivery")
        with pytest.raises(Forbidden):
            _update(order_id, BUYER, "client", "cancelled")


class TestCancellation:
    def test_cancelled_order_accepts_no_further_changes(self, order_id):
        _update(order_id, SELLER, "seller", "processing")
        order = _update(order_id, SELLER, "seller", "cancelled")
        assert order.history()[-1].status == "cancelled"

        with pytest.raises(OrderClosed):
            _update(order_id, SELLER, "seller", "processing")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "cancelled"
        assert len(order.history()) == 3


class TestValidation:
    def test_unknown_status(self, order_id):
        with pytest.raises(InvalidStatus):
            _update(order_id, SELLER, "seller", "shipped")

    def test_unknown_status_reported_before_authorization(self, order_id):
        with pytest.raises(InvalidStatus):
            _update(order_id, "stranger", "client", "shipped")

    def test_missing_order(self):
        with pytest.raises(NotFound):
            _update("no-such-order", SELLER, "seller", "processing")

    def test_history_grows_by_one_per_update(self, order_id):
        for status in ["processing", "processing", "out for delivery"]:
            _update(order_id, SELLER, "seller", status)

        order = current_domain.repository_for(Order).get(order_id)
        assert len(order.history()) == 4
        assert order.history()[0].status == "order placed"
