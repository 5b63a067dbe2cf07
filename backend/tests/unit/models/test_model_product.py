"""Tests for the Product model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from tests.factories.product import ProductFactory
from tests.factories.user import SellerFactory


class TestProduct:
    def test_factory_links_seller(self, session):
        p = ProductFactory()
        assert p.seller_id is not None
        assert p.version == 1

    def test_name_unique_across_sellers(self, session):
        ProductFactory(product_name="Cola")
        with pytest.raises(IntegrityError):
            ProductFactory(product_name="Cola", seller=SellerFactory())

    @pytest.mark.parametrize(("field", "value"), [("cost", 0), ("amount_available", -1)])
    def test_check_constraints(self, session, field, value):
        with pytest.raises(IntegrityError):
            ProductFactory(**{field: value})
