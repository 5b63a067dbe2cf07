"""Factory Boy definition for :class:`vending.models.product.Product`."""

from __future__ import annotations

import factory

from tests.factories import BaseFactory
from tests.factories.user import SellerFactory
from vending.models.product import Product


class ProductFactory(BaseFactory):
    """Build persisted products; a seller is created unless ``seller_id`` is given."""

    class Meta:
        model = Product

    class Params:
        seller = factory.SubFactory(SellerFactory)

    id = None
    product_name = factory.Sequence(lambda n: f"product-{n}")
    cost = 25
    amount_available = 10
    version = 1
    seller_id = factory.LazyAttribute(lambda o: o.seller.id)
