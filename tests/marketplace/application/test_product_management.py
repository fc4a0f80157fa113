"""Application tests for listing, editing, moderating and removing products."""

import json

import pytest
from marketplace.errors import Forbidden
from marketplace.product.creation import CreateProduct
from marketplace.product.details import RestockSize, UpdateProduct
from marketplace.product.moderation import ModerateProduct, SetProductPromotion, ToggleProductAvailability
from marketplace.product.product import Product
from marketplace.product.removal import DeleteProduct, WithdrawProduct
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestCreateProduct:
    def test_seller_lists_product(self, list_product):
        product_id = list_product(size_stock=[{"size": "M", "quantity": 3}])
        product = _product(product_id)

        assert product.seller_id == "seller-001"
        assert product.status == "pending"
        assert product.total_stock == 3

    def test_client_cannot_list(self):
        with pytest.raises(Forbidden):
            _process(
                CreateProduct(
                    actor_id="buyer-001",
                    actor_role="client",
                    name="Bag",
                    description="A bag",
                    price=10.0,
                )
            )

    def test_admin_lists_on_behalf_of_seller(self):
        product_id = _process(
            CreateProduct(
                actor_id="admin-001",
                actor_role="admin",
                seller_id="seller-007",
                name="Bag",
                description="A bag",
                price=10.0,
                total_stock=1,
            )
        )
        assert _product(product_id).seller_id == "seller-007"

    def test_seller_cannot_list_for_someone_else(self):
        product_id = _process(
            CreateProduct(
                actor_id="seller-001",
                actor_role="seller",
                seller_id="seller-007",
                name="Bag",
                description="A bag",
                price=10.0,
            )
        )
        assert _product(product_id).seller_id == "seller-001"


class TestUpdateProduct:
    def test_owner_replaces_ledger(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 1}])
        _process(
            UpdateProduct(
                actor_id="seller-001",
                actor_role="seller",
                product_id=product_id,
                size_stock=json.dumps([{"size": "S", "quantity": 2}, {"size": "M", "quantity": 2}]),
            )
        )
        product = _product(product_id)
        assert product.size_quantities() == {"S": 2, "M": 2}
        assert product.total_stock == 4

    def test_other_seller_forbidden(self, list_product):
        product_id = list_product(total_stock=1)
        with pytest.raises(Forbidden):
            _process(UpdateProduct(actor_id="seller-002", actor_role="seller", product_id=product_id, price=1.0))

    def test_admin_may_edit(self, list_product):
        product_id = list_product(total_stock=1)
        _process(UpdateProduct(actor_id="admin-001", actor_role="admin", product_id=product_id, price=1.0))
        assert _product(product_id).price == 1.0

    def test_seller_cannot_set_promotion_flags(self, list_product):
        product_id = list_product(total_stock=1)
        _process(
            UpdateProduct(actor_id="seller-001", actor_role="seller", product_id=product_id, is_featured=True)
        )
        assert _product(product_id).is_featured is False

    def test_restock_size(self, list_product):
        product_id = list_product(size_stock=[{"size": "S", "quantity": 0}])
        assert _product(product_id).is_available is False

        _process(RestockSize(actor_id="seller-001", actor_role="seller", product_id=product_id, size="S", quantity=5))
        product = _product(product_id)
        assert product.total_stock == 5
        assert product.is_available is True


class TestRemoval:
    def test_withdraw_is_soft(self, list_product):
        product_id = list_product(total_stock=4)
        _process(WithdrawProduct(actor_id="seller-001", actor_role="seller", product_id=product_id))

        product = _product(product_id)
        assert product.is_available is False
        assert product.total_stock == 4

    def test_withdraw_by_stranger_forbidden(self, list_product):
        product_id = list_product(total_stock=4)
        with pytest.raises(Forbidden):
            _process(WithdrawProduct(actor_id="buyer-001", actor_role="client", product_id=product_id))

    def test_admin_hard_delete(self, list_product):
        product_id = list_product(total_stock=4)
        _process(DeleteProduct(actor_id="admin-001", actor_role="admin", product_id=product_id))
        with pytest.raises(ObjectNotFoundError):
            _product(product_id)

    def test_seller_cannot_hard_delete(self, list_product):
        product_id = list_product(total_stock=4)
        with pytest.raises(Forbidden):
            _process(DeleteProduct(actor_id="seller-001", actor_role="seller", product_id=product_id))


class TestModeration:
    def test_admin_approves(self, list_product):
        product_id = list_product(total_stock=2)
        _process(ModerateProduct(actor_id="admin-001", actor_role="admin", product_id=product_id, status="approved"))
        assert _product(product_id).status == "approved"

    def test_admin_rejects_with_reason(self, list_product):
        product_id = list_product(total_stock=2)
        _process(
            ModerateProduct(
                actor_id="admin-001",
                actor_role="admin",
                product_id=product_id,
                status="rejected",
                reason="Prohibited item",
            )
        )
        product = _product(product_id)
        assert product.status == "rejected"
        assert product.is_available is False

    def test_seller_cannot_moderate(self, list_product):
        product_id = list_product(total_stock=2)
        with pytest.raises(Forbidden):
            _process(
                ModerateProduct(actor_id="seller-001", actor_role="seller", product_id=product_id, status="approved")
            )

    def test_toggle_availability(self, list_product):
        product_id = list_product(total_stock=2)
        result = _process(ToggleProductAvailability(actor_id="admin-001", actor_role="admin", product_id=product_id))
        assert result is False
        assert _product(product_id).is_available is False

    def test_promotion(self, list_product):
        product_id = list_product(total_stock=2)
        _process(
            SetProductPromotion(
                actor_id="admin-001",
                actor_role="admin",
                product_id=product_id,
                is_flash_sale=True,
                discount=20.0,
            )
        )
        product = _product(product_id)
        assert product.is_flash_sale is True
        assert product.discount == 20.0


class TestBrowsing:
    def test_browse_lists_available_products(self, list_product):
        on_sale = list_product(total_stock=2, name="Rattan Fan")
        list_product(total_stock=0, name="Sold Out Fan")

        products = current_domain.repository_for(Product).browse()
        assert [p.id for p in products] == [on_sale]

    def test_browse_filters(self, list_product):
        list_product(total_stock=2, name="Rattan Fan", price=100.0)
        cheap = list_product(total_stock=2, name="Bamboo Fan", price=20.0)
        list_product(total_stock=2, name="Clay Pot", price=50.0)

        repo = current_domain.repository_for(Product)
        assert [p.id for p in repo.browse(search="fan", max_price=50.0)] == [cheap]
        assert [p.name for p in repo.browse(sort="price-asc")] == ["Bamboo Fan", "Clay Pot", "Rattan Fan"]

    def test_for_seller_includes_unavailable(self, list_product):
        list_product(seller_id="seller-001", total_stock=0)
        list_product(seller_id="seller-001", total_stock=1)
        list_product(seller_id="seller-002", total_stock=1)

        repo = current_domain.repository_for(Product)
        assert len(repo.for_seller("seller-001")) == 2
        assert len(repo.for_seller("seller-001", available=True)) == 1
