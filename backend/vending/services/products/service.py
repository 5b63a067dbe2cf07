"""
ProductService
==============

Application service for the ``Product`` aggregate:

- Sellers list, update and remove their own products.
- Anyone authenticated can read and page through the catalogue.

Notes
-----
- Product names are unique across all sellers.
- Costs must be a positive multiple of the smallest coin, so every purchase
  leaves a deposit that can be paid out exactly.
- Read operations use ``ro_uow()``; write operations use ``rw_uow()``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from vending.services._shared.base import BaseService
from vending.services._shared.dto import Page
from vending.services._shared.errors import (
    DomainValidationError,
    NameTakenError,
    NotFoundError,
)
from vending.services._shared.ports import ProductRecord, Role
from vending.services.coins import DEFAULT_DENOMINATIONS, is_aligned
from vending.services.products.dto import ProductCreateIn, ProductListIn, ProductUpdateIn
from vending.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ProductService(BaseService):
    """
    Application service for the ``Product`` aggregate.

    :param uow: Unit of Work factory.
    :param denominations: Coin set; costs are aligned to its smallest coin.
    :param max_retries: Attempts for updates racing with purchases.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWorkFactory,
        denominations: Sequence[int] = DEFAULT_DENOMINATIONS,
        max_retries: int = 3,
    ) -> None:
        super().__init__(uow=uow)
        self.denominations = tuple(denominations)
        self.max_retries = max_retries

    # --------------------------------------------------------------------- #
    # Validation
    # --------------------------------------------------------------------- #

    def _check_cost(self, cost: object) -> int:
        if not _is_int(cost) or cost <= 0:  # type: ignore[operator]
            raise DomainValidationError("cost must be a positive integer", field="cost")
        if not is_aligned(cost, self.denominations):  # type: ignore[arg-type]
            raise DomainValidationError(
                f"cost should be rounded to {self.denominations[0]}", field="cost"
            )
        return cost  # type: ignore[return-value]

    @staticmethod
    def _check_amount(amount: object) -> int:
        if not _is_int(amount) or amount < 0:  # type: ignore[operator]
            raise DomainValidationError(
                "amount_available must be a non-negative integer", field="amount_available"
            )
        return amount  # type: ignore[return-value]

    @staticmethod
    def _check_name(name: object) -> str:
        if not isinstance(name, str) or not name.strip():
            raise DomainValidationError("product_name is required", field="product_name")
        return name.strip()

    # --------------------------------------------------------------------- #
    # Commands
    # --------------------------------------------------------------------- #

    def create_product(self, seller_id: int, dto: ProductCreateIn) -> ProductRecord:
        """
        List a new product owned by ``seller_id``.

        :raises NotFoundError: If the seller does not exist.
        :raises AuthorizationError: If the caller is not a seller.
        :raises DomainValidationError: If cost or stock are malformed.
        :raises NameTakenError: If any product already uses the name.
        """
        name = self._check_name(dto.product_name)
        cost = self._check_cost(dto.cost)
        amount = self._check_amount(dto.amount_available)

        with self.rw_uow() as uow:
            seller = uow.users.find_by_id(seller_id)
            if seller is None:
                raise NotFoundError("User", seller_id)
            self.ensure_role(seller.role, Role.SELLER)

            if uow.products.name_taken(name):
                raise NameTakenError("Product", name)

            product = uow.products.save(
                ProductRecord(
                    id=None,
                    product_name=name,
                    cost=cost,
                    amount_available=amount,
                    seller_id=seller_id,
                )
            )
        log.info("product.created", extra={"user_id": seller_id, "product_id": product.id})
        return product

    def update_product(self, actor_id: int, product_id: int, dto: ProductUpdateIn) -> ProductRecord:
        """
        Patch a product owned by ``actor_id``.

        :raises NotFoundError: If the product does not exist.
        :raises AuthorizationError: If the actor is not the owning seller.
        :raises NameTakenError: If the new name is used by another product.
        :raises DomainValidationError: If cost or stock are malformed.
        """
        changes: dict[str, object] = {}
        if dto.product_name is not None:
            changes["product_name"] = self._check_name(dto.product_name)
        if dto.cost is not None:
            changes["cost"] = self._check_cost(dto.cost)
        if dto.amount_available is not None:
            changes["amount_available"] = self._check_amount(dto.amount_available)

        def attempt(_: int) -> ProductRecord:
            with self.rw_uow() as uow:
                product = uow.products.find_by_id(product_id)
                if product is None:
                    raise NotFoundError("Product", product_id)
                self.ensure_owner(actor_id, product.seller_id)

                new_name = changes.get("product_name")
                if new_name is not None and uow.products.name_taken(
                    str(new_name), exclude_id=product_id
                ):
                    raise NameTakenError("Product", str(new_name))

                if not changes:
                    return product
                return uow.products.save(replace(product, **changes))

        updated = self.run_with_retries(attempt, attempts=self.max_retries, entity="Product")
        log.info("product.updated", extra={"user_id": actor_id, "product_id": product_id})
        return updated

    def delete_product(self, actor_id: int, product_id: int) -> ProductRecord:
        """
        Remove a product owned by ``actor_id``.

        :returns: The removed product.
        :raises NotFoundError: If the product does not exist.
        :raises AuthorizationError: If the actor is not the owning seller.
        """
        with self.rw_uow() as uow:
            product = uow.products.find_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            self.ensure_owner(actor_id, product.seller_id)
            uow.products.delete(product_id)
        log.info("product.deleted", extra={"user_id": actor_id, "product_id": product_id})
        return product

    # --------------------------------------------------------------------- #
    # Queries
    # --------------------------------------------------------------------- #

    def get_product(self, product_id: int) -> ProductRecord:
        with self.ro_uow() as uow:
            product = uow.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def query_products(self, dto: ProductListIn) -> Page[ProductRecord]:
        """Page through products, optionally filtered by exact name or seller."""
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        filters = {"product_name": dto.product_name, "seller_id": dto.seller_id}
        with self.ro_uow() as uow:
            return uow.products.list_page(pagination, filters=filters)
