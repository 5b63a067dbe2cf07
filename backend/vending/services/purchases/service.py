"""
PurchaseService
===============

The transaction engine: validates and applies a purchase against a product and
the buyer's deposit, then pays the whole remaining deposit out as change.

Notes
-----
- Product and buyer are saved with the versions they were read at. If either
  moved on in between, the whole unit of work is discarded and the purchase is
  retried with fresh reads, up to ``max_retries`` attempts.
- Validation failures raise before anything is staged, so no failure path
  leaves a partial mutation behind.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from vending.services._shared.base import BaseService
from vending.services._shared.errors import (
    InsufficientFundsError,
    InsufficientInventoryError,
    InvalidAmountError,
    NotFoundError,
)
from vending.services._shared.ports import Role
from vending.services.coins import DEFAULT_DENOMINATIONS, decompose_change
from vending.services.purchases.dto import BuyIn, PurchaseOut
from vending.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


class PurchaseService(BaseService):
    """
    Buy products with a deposited balance.

    :param uow: Unit of Work factory.
    :param denominations: Validated, ascending coin set used for change.
    :param max_retries: Attempts before a concurrency conflict is reported.
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

    def buy_product(self, buyer_id: int, dto: BuyIn) -> PurchaseOut:
        """
        Buy ``dto.amount`` units of ``dto.product_id``.

        :param buyer_id: Authenticated buyer.
        :param dto: Product and amount.
        :returns: Total charged, updated product and the change owed.
        :raises NotFoundError: If the product or buyer does not exist.
        :raises AuthorizationError: If the caller is not a buyer.
        :raises InvalidAmountError: If ``amount`` is not a positive integer.
        :raises InsufficientInventoryError: If ``amount`` exceeds the stock.
        :raises InsufficientFundsError: If the total exceeds the deposit.
        :raises ConcurrencyConflictError: If every attempt hit a concurrent write.
        """

        def attempt(n: int) -> PurchaseOut:
            return self._buy_once(buyer_id, dto, attempt=n)

        return self.run_with_retries(attempt, attempts=self.max_retries, entity="Product")

    def _buy_once(self, buyer_id: int, dto: BuyIn, *, attempt: int) -> PurchaseOut:
        with self.rw_uow() as uow:
            product = uow.products.find_by_id(dto.product_id)
            if product is None:
                raise NotFoundError("Product", dto.product_id)
            buyer = uow.users.find_by_id(buyer_id)
            if buyer is None:
                raise NotFoundError("User", buyer_id)
            self.ensure_role(buyer.role, Role.BUYER)

            amount = dto.amount
            if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
                raise InvalidAmountError("Amount must be a positive integer")
            if amount > product.amount_available:
                raise InsufficientInventoryError()

            total = amount * product.cost
            if total > buyer.deposit:
                raise InsufficientFundsError()

            product = uow.products.save(
                replace(product, amount_available=product.amount_available - amount)
            )
            buyer = uow.users.save(replace(buyer, deposit=buyer.deposit - total))
            # commit (and the final version check) happens on context exit

        change = decompose_change(buyer.deposit, self.denominations)
        log.info(
            "purchase.completed",
            extra={
                "user_id": buyer_id,
                "product_id": product.id,
                "amount": amount,
                "total": total,
                "attempt": attempt,
            },
        )
        return PurchaseOut(total=total, product=product, change=change, deposit=buyer.deposit)
