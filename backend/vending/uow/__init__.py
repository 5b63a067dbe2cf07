"""Unit of Work abstractions and concrete implementations.

This package re-exports the contracts service layers depend on. Concrete
implementations live in :mod:`vending.uow.sqlalchemy_uow` and
:mod:`vending.uow.memory_uow`.
"""

from .base import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "UnitOfWork",
    "UnitOfWorkFactory",
]
