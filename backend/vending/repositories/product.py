"""Product repository mapping ``products`` rows to :class:`ProductRecord` snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from vending.models.product import Product
from vending.repositories.base import BaseRepository
from vending.services._shared.dto import Page, Pagination
from vending.services._shared.errors import NameTakenError, violates
from vending.services._shared.ports import ProductRecord, ProductRepository


def _to_record(row: Product) -> ProductRecord:
    return ProductRecord(
        id=row.id,
        product_name=row.product_name,
        cost=row.cost,
        amount_available=row.amount_available,
        seller_id=row.seller_id,
        version=row.version,
    )


class SQLAlchemyProductRepository(BaseRepository[Product], ProductRepository):
    """Persistence-only repository for :class:`Product`."""

    model = Product
    entity_name = "Product"

    def _sortable_fields(self):
        return {
            "id": Product.id,
            "product_name": Product.product_name,
            "cost": Product.cost,
            "amount_available": Product.amount_available,
            "created_at": Product.created_at,
        }

    def _filterable_fields(self):
        return {
            "product_name": Product.product_name,
            "seller_id": Product.seller_id,
        }

    # ---------------------------- Lookups ----------------------------

    def find_by_id(self, product_id: int) -> ProductRecord | None:
        row = self._get_row(product_id)
        return _to_record(row) if row is not None else None

    def find_by_name(self, product_name: str) -> ProductRecord | None:
        row = self._find_row(product_name=product_name.strip())
        return _to_record(row) if row is not None else None

    def name_taken(self, product_name: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` if any product (of any seller) already uses the name.

        :param product_name: Candidate name, compared after trimming.
        :param exclude_id: Product to ignore (the one being renamed).
        """
        clauses: list[Any] = [Product.product_name == product_name.strip()]
        if exclude_id is not None:
            clauses.append(Product.id != exclude_id)
        return self._exists(*clauses)

    def list_page(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[ProductRecord]:
        page = self.paginate(pagination, filters=filters)
        return Page(
            items=[_to_record(r) for r in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )

    # ---------------------------- Writes ----------------------------

    def save(self, product: ProductRecord) -> ProductRecord:
        """Insert a new product or apply a version-checked update.

        ``seller_id`` is written on insert only.

        :raises NameTakenError: If the product name collides.
        :raises StaleEntityError: If the row changed since ``product`` was read.
        """
        values = {
            "product_name": product.product_name.strip(),
            "cost": product.cost,
            "amount_available": product.amount_available,
        }
        try:
            if product.id is None:
                row = self._insert(Product(**values, seller_id=product.seller_id, version=1))
                return replace(
                    product, id=row.id, product_name=row.product_name, version=row.version
                )
            new_version = self._versioned_update(product.id, product.version, values)
        except IntegrityError as exc:
            if violates(exc, "product_name") or violates(exc, "uq_products_product_name"):
                raise NameTakenError("Product", product.product_name) from exc
            raise
        return replace(product, product_name=values["product_name"], version=new_version)

    def delete(self, product_id: int) -> bool:
        return self._delete_by_id(product_id)

    def delete_by_seller(self, seller_id: int) -> int:
        """Remove every product listed by ``seller_id``.

        :returns: Number of removed rows.
        """
        stmt = (
            delete(Product)
            .where(Product.seller_id == seller_id)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
