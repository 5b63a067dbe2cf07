"""
In-memory Unit of Work for unit tests and single-process runs.

:class:`InMemoryDatabase` holds committed records behind one lock. Each
:class:`InMemoryUnitOfWork` stages its writes privately and publishes them at
commit time, after re-checking every version it read and every unique name,
so a commit is all-or-nothing.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any, Generic, TypeVar

from vending.services._shared.dto import Page, Pagination
from vending.services._shared.errors import NameTakenError, StaleEntityError
from vending.services._shared.ports import ProductRecord, UserRecord
from vending.uow.base import UnitOfWork

R = TypeVar("R", UserRecord, ProductRecord)

_DELETED = None


class _Table(Generic[R]):
    """Committed rows of one aggregate plus its id sequence."""

    def __init__(self, entity: str, unique_field: str) -> None:
        self.entity = entity
        self.unique_field = unique_field
        self.rows: dict[int, R] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)


class InMemoryDatabase:
    """Shared committed state. Thread-safe; hand one instance to many UoWs."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users: _Table[UserRecord] = _Table("User", "username")
        self.products: _Table[ProductRecord] = _Table("Product", "product_name")

    def writer(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    def reader(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self, read_only=True)


def _page(
    records: Iterable[R],
    pagination: Pagination,
    *,
    filters: Mapping[str, Any] | None,
    filterable: set[str],
) -> Page[R]:
    items = list(records)
    for key, value in (filters or {}).items():
        if key in filterable and value is not None:
            items = [r for r in items if _plain(getattr(r, key)) == _plain(value)]

    items.sort(key=lambda r: r.id or 0)
    # stable sorts applied last-token-first keep multi-key ordering
    for token in reversed(pagination.sort):
        desc = token.startswith("-")
        field = token.lstrip("-").strip()
        if field and items and hasattr(items[0], field):
            items.sort(key=lambda r, f=field: _plain(getattr(r, f)), reverse=desc)

    page = max(1, pagination.page)
    limit = max(1, pagination.limit)
    start = (page - 1) * limit
    return Page(items=items[start : start + limit], total=len(items), page=page, limit=limit)


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


class _StagedRepository(Generic[R]):
    """Repository view = committed rows overlaid with this UoW's staged writes."""

    filterable: set[str] = set()

    def __init__(self, uow: InMemoryUnitOfWork, table: _Table[R]) -> None:
        self._uow = uow
        self._table = table
        self.staged: dict[int, R | None] = {}
        self.read_versions: dict[int, int | None] = {}

    # ------------------------------ reads ------------------------------

    def _visible(self) -> dict[int, R]:
        with self._uow.db.lock:
            rows = dict(self._table.rows)
        for rid, rec in self.staged.items():
            if rec is _DELETED:
                rows.pop(rid, None)
            else:
                rows[rid] = rec
        return rows

    def _get(self, rid: int) -> R | None:
        return self._visible().get(rid)

    def _find(self, predicate: Callable[[R], bool]) -> R | None:
        for rec in sorted(self._visible().values(), key=lambda r: r.id or 0):
            if predicate(rec):
                return rec
        return None

    def _taken(self, name: str, exclude_id: int | None) -> bool:
        field = self._table.unique_field
        name = name.strip()
        return any(
            getattr(r, field) == name and r.id != exclude_id for r in self._visible().values()
        )

    def list_page(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[R]:
        return _page(
            self._visible().values(), pagination, filters=filters, filterable=self.filterable
        )

    # ------------------------------ writes ------------------------------

    def save(self, record: R) -> R:
        self._uow.ensure_writable()
        if record.id is None:
            with self._uow.db.lock:
                rid = self._table.next_id()
            stored = replace(record, id=rid, version=1)
            self.staged[rid] = stored
            self.read_versions.setdefault(rid, None)
            return stored

        current = self._get(record.id)
        if current is None or current.version != record.version:
            raise StaleEntityError(self._table.entity, record.id, record.version)
        stored = replace(record, version=record.version + 1)
        if record.id not in self.read_versions:
            self.read_versions[record.id] = record.version
        self.staged[record.id] = stored
        return stored

    def delete(self, rid: int) -> bool:
        self._uow.ensure_writable()
        current = self._get(rid)
        if current is None:
            return False
        if rid not in self.read_versions:
            self.read_versions[rid] = current.version
        self.staged[rid] = _DELETED
        return True

    # ------------------------------ commit ------------------------------

    def check(self) -> None:
        """Verify staged writes against committed state. Caller holds the lock."""
        rows = self._table.rows
        for rid, expected in self.read_versions.items():
            if expected is None:
                continue
            committed = rows.get(rid)
            if committed is None or committed.version != expected:
                raise StaleEntityError(self._table.entity, rid, expected)

        field = self._table.unique_field
        final = dict(rows)
        for rid, rec in self.staged.items():
            if rec is _DELETED:
                final.pop(rid, None)
            else:
                final[rid] = rec
        seen: set[str] = set()
        for rec in final.values():
            name = getattr(rec, field)
            if name in seen:
                raise NameTakenError(self._table.entity, name)
            seen.add(name)

    def apply(self) -> None:
        for rid, rec in self.staged.items():
            if rec is _DELETED:
                self._table.rows.pop(rid, None)
            else:
                self._table.rows[rid] = rec
        self.reset()

    def reset(self) -> None:
        self.staged.clear()
        self.read_versions.clear()


class InMemoryUserRepository(_StagedRepository[UserRecord]):
    filterable = {"username", "role"}

    def find_by_id(self, user_id: int) -> UserRecord | None:
        return self._get(user_id)

    def find_by_username(self, username: str) -> UserRecord | None:
        username = username.strip()
        return self._find(lambda r: r.username == username)

    def username_taken(self, username: str, *, exclude_id: int | None = None) -> bool:
        return self._taken(username, exclude_id)


class InMemoryProductRepository(_StagedRepository[ProductRecord]):
    filterable = {"product_name", "seller_id"}

    def find_by_id(self, product_id: int) -> ProductRecord | None:
        return self._get(product_id)

    def find_by_name(self, product_name: str) -> ProductRecord | None:
        product_name = product_name.strip()
        return self._find(lambda r: r.product_name == product_name)

    def name_taken(self, product_name: str, *, exclude_id: int | None = None) -> bool:
        return self._taken(product_name, exclude_id)

    def delete_by_seller(self, seller_id: int) -> int:
        owned = [r.id for r in self._visible().values() if r.seller_id == seller_id]
        return sum(1 for rid in owned if rid is not None and self.delete(rid))


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work over an :class:`InMemoryDatabase`.

    Commits on clean exit, discards staged writes on error. ``read_only``
    instances refuse writes and never commit.
    """

    def __init__(self, db: InMemoryDatabase, *, read_only: bool = False) -> None:
        self.db = db
        self.read_only = read_only
        self.users = InMemoryUserRepository(self, db.users)
        self.products = InMemoryProductRepository(self, db.products)

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self.read_only:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def ensure_writable(self) -> None:
        if self.read_only:
            raise RuntimeError("Read-only UnitOfWork does not allow writes.")

    def commit(self) -> None:
        if self.read_only:
            raise RuntimeError("Read-only UnitOfWork does not allow commit().")
        with self.db.lock:
            self.users.check()
            self.products.check()
            self.users.apply()
            self.products.apply()

    def rollback(self) -> None:
        self.users.reset()
        self.products.reset()
