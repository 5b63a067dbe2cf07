"""Coin arithmetic shared by deposits, product pricing and purchases."""

from .ledger import (
    DEFAULT_DENOMINATIONS,
    decompose_change,
    is_aligned,
    is_valid_denomination,
    total_of,
    validate_denominations,
)

__all__ = [
    "DEFAULT_DENOMINATIONS",
    "decompose_change",
    "is_aligned",
    "is_valid_denomination",
    "total_of",
    "validate_denominations",
]
