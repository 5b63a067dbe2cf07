"""
DTOs for ProductService.

These DTOs define framework-agnostic contracts between the API layer and the
application service managing the ``Product`` aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ProductCreateIn:
    """
    Input DTO for listing a new product.

    :param product_name: Globally unique name.
    :type product_name: str
    :param cost: Unit price in minor units (multiple of the smallest coin).
    :type cost: int
    :param amount_available: Initial stock.
    :type amount_available: int
    """

    product_name: str
    cost: int
    amount_available: int = 0


@dataclass(frozen=True, slots=True)
class ProductUpdateIn:
    """
    Partial update; ``None`` leaves a field untouched.

    :param product_name: New name.
    :param cost: New unit price.
    :param amount_available: New stock level.
    """

    product_name: str | None = None
    cost: int | None = None
    amount_available: int | None = None


@dataclass(frozen=True, slots=True)
class ProductListIn:
    """
    Listing filters and pagination.

    :param product_name: Exact-name filter.
    :param seller_id: Restrict to one seller.
    :param page: 1-based page.
    :param limit: Page size.
    :param sort: Sort tokens (``"-cost"``, ``"product_name"``).
    """

    product_name: str | None = None
    seller_id: int | None = None
    page: int = 1
    limit: int = 10
    sort: list[str] = field(default_factory=list)
