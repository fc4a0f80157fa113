import os

import pytest


@pytest.fixture(scope="session")
def _marketplace_domain(request):
    """Initialize the marketplace domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


@pytest.fixture(scope="session", autouse=True)
def setup_db(_marketplace_domain):
    from marketplace.utils.db import drop_db, setup_db

    setup_db(_marketplace_domain)

    yield

    drop_db(_marketplace_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
SELLER_ID = "seller-001"
OTHER_SELLER_ID = "seller-002"
BUYER_ID = "buyer-001"
ADMIN_ID = "admin-001"


@pytest.fixture()
def list_product():
    """Create and persist a product via the CreateProduct command; returns its id."""
    import json

    from marketplace.product.creation import CreateProduct
    from protean.utils.globals import current_domain

    def _list_product(seller_id=SELLER_ID, size_stock=None, total_stock=0, **overrides):
        defaults = {
            "actor_id": seller_id,
            "actor_role": "seller",
            "name": "Handwoven Basket",
            "description": "Rattan basket woven by hand",
            "price": 250.0,
            "size_stock": json.dumps(size_stock or []),
            "total_stock": total_stock,
        }
        defaults.update(overrides)
        return current_domain.process(CreateProduct(**defaults), asynchronous=False)

    return _list_product
