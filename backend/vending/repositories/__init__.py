"""Repository package exposing persistence-layer access for the domain models."""

from __future__ import annotations

from vending.repositories import base as base_module
from vending.repositories.base import BaseRepository, paginate_select, parse_sort_tokens
from vending.repositories.product import SQLAlchemyProductRepository
from vending.repositories.user import SQLAlchemyUserRepository

# Public alias for the whitelist-based ORDER BY builder
apply_sorting = base_module._apply_sorting

__all__ = [
    # Base
    "BaseRepository",
    "paginate_select",
    "parse_sort_tokens",
    "apply_sorting",
    # Domain
    "SQLAlchemyProductRepository",
    "SQLAlchemyUserRepository",
]
