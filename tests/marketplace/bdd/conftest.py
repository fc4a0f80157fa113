"""Shared BDD fixtures and step definitions for the marketplace workflows."""

import json

import pytest
from marketplace.errors import Forbidden, InsufficientStock, OrderClosed
from marketplace.order.order import Order
from marketplace.order.placement import place_order
from marketplace.order.status import UpdateOrderStatus
from marketplace.product.creation import CreateProduct
from marketplace.product.product import Product
from protean.exceptions import ProteanException
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

SELLER_ID = "seller-001"
BUYER_ID = "buyer-001"

_ACTORS = {
    "buyer": (BUYER_ID, "client"),
    "seller": (SELLER_ID, "seller"),
    "admin": ("admin-001", "admin"),
}


def _parse_sizes(text):
    """Turn ``"S=2, M=0"`` into ledger entries."""
    entries = []
    for part in text.split(","):
        size, quantity = part.strip().split("=")
        entries.append({"size": size, "quantity": int(quantity)})
    return entries


def _list(size_stock=None, total_stock=0):
    return current_domain.process(
        CreateProduct(
            actor_id=SELLER_ID,
            actor_role="seller",
            name="Handwoven Basket",
            description="Rattan basket woven by hand",
            price=250.0,
            size_stock=json.dumps(size_stock or []),
            total_stock=total_stock,
        ),
        asynchronous=False,
    )


def _order(product_id, quantity, size=None):
    item = {"product_id": product_id, "quantity": quantity}
    if size:
        item["size"] = size
    return place_order(BUYER_ID, [item])


def _set_status(order_id, actor, status):
    actor_id, actor_role = _ACTORS[actor]
    current_domain.process(
        UpdateOrderStatus(order_id=order_id, actor_id=actor_id, actor_role=actor_role, status=status),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for the last placed order or captured error."""
    return {"order": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product with size stock "{sizes}"'), target_fixture="product_id")
def _(sizes):
    return _list(size_stock=_parse_sizes(sizes))


@given(parsers.cfparse("an unsized product with {quantity:d} in stock"), target_fixture="product_id")
def _(quantity):
    return _list(total_stock=quantity)


@given(
    parsers.cfparse('the buyer has placed an order for {quantity:d} of size "{size}"'),
    target_fixture="order_id",
)
def _(product_id, quantity, size):
    return _order(product_id, quantity, size).id


@given(parsers.cfparse('the {actor} has set the order status to "{status}"'))
def _(order_id, actor, status):
    _set_status(order_id, actor, status)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the buyer orders {quantity:d} of size "{size}"'))
def _(outcome, product_id, quantity, size):
    try:
        outcome["order"], outcome["exc"] = _order(product_id, quantity, size), None
    except ProteanException as exc:
        outcome["order"], outcome["exc"] = None, exc


@when(parsers.cfparse("the buyer orders {quantity:d} without a size"))
def _(outcome, product_id, quantity):
    try:
        outcome["order"], outcome["exc"] = _order(product_id, quantity), None
    except ProteanException as exc:
        outcome["order"], outcome["exc"] = None, exc


@when(parsers.cfparse('the {actor} sets the order status to "{status}"'))
def _(outcome, order_id, actor, status):
    try:
        _set_status(order_id, actor, status)
        outcome["exc"] = None
    except ProteanException as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is placed")
def _(outcome):
    assert outcome["exc"] is None, f"Unexpected error: {outcome['exc']}"
    assert outcome["order"].status == "order placed"


@then("the order is refused for insufficient stock")
def _(outcome):
    assert isinstance(outcome["exc"], InsufficientStock)


@then(parsers.cfparse('the size stock is "{sizes}"'))
def _(product_id, sizes):
    product = current_domain.repository_for(Product).get(product_id)
    expected = {entry["size"]: entry["quantity"] for entry in _parse_sizes(sizes)}
    assert product.size_quantities() == expected


@then(parsers.cfparse("the product total stock is {quantity:d}"))
def _(product_id, quantity):
    assert current_domain.repository_for(Product).get(product_id).total_stock == quantity


@then("the product is unavailable")
def _(product_id):
    assert current_domain.repository_for(Product).get(product_id).is_available is False


@then("the status change is forbidden")
def _(outcome):
    assert isinstance(outcome["exc"], Forbidden)


@then("the status change is refused because the order is closed")
def _(outcome):
    assert isinstance(outcome["exc"], OrderClosed)


@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('the order history ends with "{status}"'))
def _(order_id, status):
    history = current_domain.repository_for(Order).get(order_id).history()
    assert history[-1].status == status
