# tests/unit/services/test_product_service.py
from __future__ import annotations

import pytest

from tests.helpers.memory import committed_product, seed_product, seed_user
from vending.services._shared.errors import (
    AuthorizationError,
    DomainValidationError,
    NameTakenError,
    NotFoundError,
)
from vending.services._shared.ports import Role
from vending.services.products.dto import ProductCreateIn, ProductListIn, ProductUpdateIn
from vending.services.products.service import ProductService


@pytest.fixture()
def service(memory_db) -> ProductService:
    return ProductService(uow=memory_db)


@pytest.fixture()
def seller(memory_db):
    return seed_user(memory_db, "seller", role=Role.SELLER)


@pytest.fixture()
def other_seller(memory_db):
    return seed_user(memory_db, "rival", role=Role.SELLER)


class TestCreateProduct:
    def test_create(self, service, seller):
        p = service.create_product(
            seller.id, ProductCreateIn(product_name=" Cola ", cost=25, amount_available=3)
        )

        assert p.id is not None
        assert p.product_name == "Cola"
        assert p.seller_id == seller.id
        assert p.version == 1

    def test_buyers_cannot_create(self, service, memory_db):
        buyer = seed_user(memory_db, "buyer")
        with pytest.raises(AuthorizationError):
            service.create_product(buyer.id, ProductCreateIn(product_name="X", cost=5))

    @pytest.mark.parametrize("cost", [0, -5, 27, 1])
    def test_cost_must_be_positive_and_aligned(self, service, seller, cost):
        with pytest.raises(DomainValidationError) as info:
            service.create_product(seller.id, ProductCreateIn(product_name="X", cost=cost))
        assert info.value.field == "cost"

    def test_negative_stock(self, service, seller):
        with pytest.raises(DomainValidationError):
            service.create_product(
                seller.id, ProductCreateIn(product_name="X", cost=5, amount_available=-1)
            )

    def test_names_are_unique_across_sellers(self, service, seller, other_seller):
        service.create_product(seller.id, ProductCreateIn(product_name="Cola", cost=25))
        with pytest.raises(NameTakenError):
            service.create_product(other_seller.id, ProductCreateIn(product_name="Cola", cost=25))

    def test_unknown_seller(self, service):
        with pytest.raises(NotFoundError):
            service.create_product(404, ProductCreateIn(product_name="X", cost=5))


class TestUpdateProduct:
    def test_owner_updates(self, service, memory_db, seller):
        p = seed_product(memory_db, seller.id)

        updated = service.update_product(
            seller.id, p.id, ProductUpdateIn(cost=30, amount_available=4)
        )

        assert (updated.cost, updated.amount_available) == (30, 4)
        assert updated.version == p.version + 1
        assert committed_product(memory_db, p.id) == updated

    def test_non_owner_is_forbidden(self, service, memory_db, seller, other_seller):
        p = seed_product(memory_db, seller.id)
        with pytest.raises(AuthorizationError):
            service.update_product(other_seller.id, p.id, ProductUpdateIn(cost=30))
        assert committed_product(memory_db, p.id) == p

    def test_rename_to_taken_name(self, service, memory_db, seller):
        seed_product(memory_db, seller.id, name="Cola")
        p = seed_product(memory_db, seller.id, name="Fanta")
        with pytest.raises(NameTakenError):
            service.update_product(seller.id, p.id, ProductUpdateIn(product_name="Cola"))

    def test_keeping_own_name_is_fine(self, service, memory_db, seller):
        p = seed_product(memory_db, seller.id, name="Cola")
        updated = service.update_product(seller.id, p.id, ProductUpdateIn(product_name="Cola"))
        assert updated.product_name == "Cola"

    def test_misaligned_cost(self, service, memory_db, seller):
        p = seed_product(memory_db, seller.id)
        with pytest.raises(DomainValidationError):
            service.update_product(seller.id, p.id, ProductUpdateIn(cost=12))

    def test_missing_product(self, service, seller):
        with pytest.raises(NotFoundError):
            service.update_product(seller.id, 999, ProductUpdateIn(cost=10))


class TestDeleteAndQuery:
    def test_owner_deletes(self, service, memory_db, seller):
        p = seed_product(memory_db, seller.id)
        assert service.delete_product(seller.id, p.id) == p
        with pytest.raises(NotFoundError):
            service.get_product(p.id)

    def test_non_owner_cannot_delete(self, service, memory_db, seller, other_seller):
        p = seed_product(memory_db, seller.id)
        with pytest.raises(AuthorizationError):
            service.delete_product(other_seller.id, p.id)
        assert service.get_product(p.id) == p

    def test_query_filters_and_pages(self, service, memory_db, seller, other_seller):
        for i in range(5):
            seed_product(memory_db, seller.id, name=f"p{i}", cost=5 * (i + 1))
        seed_product(memory_db, other_seller.id, name="theirs")

        page = service.query_products(ProductListIn(seller_id=seller.id, limit=2, sort=["-cost"]))

        assert page.total == 5
        assert page.total_pages == 3
        assert [p.cost for p in page.items] == [25, 20]

        by_name = service.query_products(ProductListIn(product_name="theirs"))
        assert [p.seller_id for p in by_name.items] == [other_seller.id]
