"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from vending.services._shared.ports import ProductRepository, UserRepository


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Provide access to repositories bound to the same session/transaction.
    - Commit on success, rollback on error.

    A commit that finds a row changed since it was read raises
    :class:`~vending.services._shared.errors.StaleEntityError` and applies nothing.
    """

    users: UserRepository
    products: ProductRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Hands out fresh units of work; injected into services."""

    def writer(self) -> UnitOfWork:
        """Return a read-write unit of work (commits on clean exit)."""

    def reader(self) -> UnitOfWork:
        """Return a read-only unit of work (always rolls back)."""
