# comments in English; reST docstrings strict
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number (validated to be ``>= 1``).
    :type page: int
    :param limit: Page size (validated to be ``>= 1``).
    :type limit: int
    :param sort: Public sort tokens (e.g., ``["-created_at", "product_name"]``).
    :type sort: list[str]
    """

    page: int = 1
    limit: int = 10
    sort: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Page(Generic[T]):
    """Result page with metadata.

    :param items: Listed records in the current page.
    :type items: Sequence[T]
    :param total: Total item count for the query.
    :type total: int
    :param page: 1-based current page number.
    :type page: int
    :param limit: Page size.
    :type limit: int
    """

    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Number of pages needed to show ``total`` items."""
        return max(1, -(-self.total // self.limit)) if self.limit else 1
