"""
DTOs for PurchaseService.
"""

from __future__ import annotations

from dataclasses import dataclass

from vending.services._shared.ports import ProductRecord


@dataclass(frozen=True, slots=True)
class BuyIn:
    """
    Input DTO for a purchase.

    :param product_id: Product to buy.
    :type product_id: int
    :param amount: Number of units (positive).
    :type amount: int
    """

    product_id: int
    amount: int


@dataclass(frozen=True, slots=True)
class PurchaseOut:
    """
    Output DTO for a completed purchase.

    :param total: Amount charged (``amount * cost``).
    :param product: Product snapshot after the stock decrement.
    :param change: Coin counts paying out the buyer's remaining deposit, one
        entry per denomination in ascending order.
    :param deposit: The buyer's deposit after the purchase.
    """

    total: int
    product: ProductRecord
    change: tuple[int, ...]
    deposit: int
