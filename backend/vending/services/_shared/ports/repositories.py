"""
Repository ports for the two mutable aggregates (users and products).

Records are immutable snapshots carrying the ``version`` they were read at.
Mutations are expressed by ``dataclasses.replace`` and handed back to ``save``,
which applies them only if the stored version is still the one that was read.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from vending.services._shared.dto import Page, Pagination


class Role(str, Enum):
    """User role."""

    BUYER = "buyer"
    SELLER = "seller"


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Snapshot of a user row.

    :ivar id: Surrogate key (``None`` before first save).
    :ivar username: Unique, case-sensitive login name.
    :ivar password_hash: Opaque credential hash, never serialized outward.
    :ivar role: Buyer or seller.
    :ivar deposit: Balance in minor units.
    :ivar version: Optimistic-concurrency version the snapshot was read at.
    """

    id: int | None
    username: str
    password_hash: str = field(repr=False)
    role: Role
    deposit: int = 0
    version: int = 0


@dataclass(frozen=True, slots=True)
class ProductRecord:
    """
    Snapshot of a product row.

    :ivar id: Surrogate key (``None`` before first save).
    :ivar product_name: Globally unique name.
    :ivar cost: Unit price in minor units, aligned to the smallest coin.
    :ivar amount_available: Units in stock.
    :ivar seller_id: Owning seller, immutable after creation.
    :ivar version: Optimistic-concurrency version the snapshot was read at.
    """

    id: int | None
    product_name: str
    cost: int
    amount_available: int
    seller_id: int
    version: int = 0


class UserRepository(Protocol):
    """Persistence port for users."""

    def find_by_id(self, user_id: int) -> UserRecord | None: ...

    def find_by_username(self, username: str) -> UserRecord | None: ...

    def username_taken(self, username: str, *, exclude_id: int | None = None) -> bool: ...

    def save(self, user: UserRecord) -> UserRecord:
        """
        Insert (``id is None``) or conditionally update a user.

        :returns: The stored snapshot with its new id/version.
        :raises StaleEntityError: If the stored version differs from ``user.version``.
        """

    def delete(self, user_id: int) -> bool: ...

    def list_page(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[UserRecord]: ...


class ProductRepository(Protocol):
    """Persistence port for products."""

    def find_by_id(self, product_id: int) -> ProductRecord | None: ...

    def find_by_name(self, product_name: str) -> ProductRecord | None: ...

    def name_taken(self, product_name: str, *, exclude_id: int | None = None) -> bool: ...

    def save(self, product: ProductRecord) -> ProductRecord:
        """
        Insert (``id is None``) or conditionally update a product.

        :returns: The stored snapshot with its new id/version.
        :raises StaleEntityError: If the stored version differs from ``product.version``.
        """

    def delete(self, product_id: int) -> bool: ...

    def delete_by_seller(self, seller_id: int) -> int: ...

    def list_page(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[ProductRecord]: ...
