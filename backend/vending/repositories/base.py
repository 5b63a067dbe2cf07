"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Safe sorting with a whitelist mapping (prevents SQL injection).
- Deterministic pagination (adds primary-key tiebreaker).
- Conditional, version-checked updates for optimistic concurrency.
- No business logic, no commit/rollback; Services own transactions.

Design decisions
----------------
* Repositories MUST remain thin and persistence-focused:
  - They never implement use cases or domain policies.
  - They never call commit/rollback; the Unit of Work does.
* Sorting is opt-in per aggregate via ``_sortable_fields`` mapping.
* Filtering is opt-in per aggregate via ``_filterable_fields`` mapping.
* Writes to existing rows go through :meth:`BaseRepository._versioned_update`,
  which only touches the row when its ``version`` still matches the one read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, delete, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from vending.core.extensions import db
from vending.services._shared.dto import Page, Pagination
from vending.services._shared.errors import StaleEntityError

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples.

    :param raw: Public tokens like ``["-created_at", "product_name"]``.
    :type raw: Iterable[str]
    :returns: List of ``(field_name, is_desc)`` tokens.
    :rtype: list[tuple[str, bool]]
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = token[1:] if is_desc else token
        field = field.strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def _apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply safe ``ORDER BY`` clauses based on a whitelist mapping.

    Unknown sort tokens are ignored silently. The model's primary key is always
    appended as a final ascending tiebreaker to stabilize pagination.

    :param stmt: Base selectable.
    :type stmt: :class:`sqlalchemy.sql.Select`
    :param sortable_fields: Public field -> SQLAlchemy attribute mapping.
    :type sortable_fields: Mapping[str, InstrumentedAttribute]
    :param tokens: Public sort tokens (e.g., ``["-cost"]``).
    :type tokens: Iterable[str]
    :param pk_attr: Primary-key attribute used as a tiebreaker.
    :type pk_attr: InstrumentedAttribute | None
    :returns: Modified select with ``ORDER BY`` clauses.
    :rtype: :class:`sqlalchemy.sql.Select`
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())

    if orders:
        stmt = stmt.order_by(*orders)

    # Always add PK as a final tiebreaker to stabilize pagination
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())

    return stmt


# --------------------------- Pagination execution ----------------------------


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Execute a select with pagination and a total count.

    The statement's existing ``ORDER BY`` is stripped for the ``COUNT`` to avoid
    unnecessary sorting overhead.

    :param session: Active SQLAlchemy session.
    :type session: :class:`sqlalchemy.orm.Session`
    :param stmt: Base select to paginate (already filtered/sorted).
    :type stmt: :class:`sqlalchemy.sql.Select`
    :param page: 1-based page number (will be clamped to ``>= 1``).
    :type page: int
    :param limit: Page size (will be clamped to ``>= 1``).
    :type limit: int
    :returns: Tuple of ``(items, total)``.
    :rtype: tuple[list[Any], int]
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())

    offset = (page - 1) * limit
    sliced = stmt.limit(limit).offset(offset)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class (with ``id`` and ``version``).
    * ``entity_name``: human-readable name used in error messages.

    Subclasses MAY override:

    * ``_sortable_fields`` to expose safe sort keys.
    * ``_filterable_fields`` to enable filter whitelisting.

    This class NEVER:

    * opens/commits/rolls back transactions,
    * implements business rules or cross-aggregate coordination.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]
    entity_name: str = "Entity"

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``vending.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    # ------------------------------ Session access ---------------------------

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session.

        :returns: Active session bound to the current Unit of Work.
        :rtype: :class:`sqlalchemy.orm.Session`
        """
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        """Return the model's primary-key ``InstrumentedAttribute`` if available."""
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public sort keys to model attributes.

        :returns: Public key -> ORM attribute mapping.
        :rtype: Mapping[str, InstrumentedAttribute]
        """
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist of equality-filterable fields.

        Only keys present in the map are applied; unknown keys are ignored.

        :returns: Public key -> ORM attribute mapping.
        :rtype: Mapping[str, InstrumentedAttribute]
        """
        return {}

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        """Apply whitelisted equality filters. ``None`` values are skipped.

        :param stmt: Input select to filter.
        :type stmt: :class:`sqlalchemy.sql.Select`
        :param filters: Field=value mapping (equality only).
        :type filters: Mapping[str, Any] | None
        :returns: Filtered select.
        :rtype: :class:`sqlalchemy.sql.Select`
        """
        if not filters:
            return stmt

        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for k, v in filters.items():
            col = allowed.get(k)
            if isinstance(col, InstrumentedAttribute) and v is not None:
                clauses.append(col == v)
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _get_row(self, entity_id: Any) -> E | None:
        """Load a row by PK, refreshing any stale instance in the identity map."""
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)  # type: ignore[attr-defined]
            .execution_options(populate_existing=True)
        )
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def _find_row(self, **filters: Any) -> E | None:
        """Find a single row by equality filters on mapped attributes."""
        clauses = [getattr(self.model, k) == v for k, v in filters.items()]
        stmt = select(self.model).where(*clauses).execution_options(populate_existing=True)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def _exists(self, *clauses: Any) -> bool:
        """Return ``True`` when at least one row satisfies all ``clauses``."""
        stmt = select(func.count()).select_from(self.model).where(*clauses)
        return bool(self.session.execute(stmt).scalar_one())

    # --------------------------------- Writes --------------------------------

    def _insert(self, instance: E) -> E:
        """Stage a new row and flush it inside a SAVEPOINT to materialize the PK.

        A constraint violation only rolls back the SAVEPOINT, so the caller can
        translate it without poisoning the surrounding transaction.
        """
        with self.session.begin_nested():
            self.session.add(instance)
        return instance

    def _versioned_update(
        self, entity_id: int, expected_version: int, values: Mapping[str, Any]
    ) -> int:
        """Apply ``values`` only if the row still has ``expected_version``.

        :param entity_id: Primary key of the row.
        :param expected_version: Version the caller read.
        :param values: Column values to write.
        :returns: The new version.
        :raises StaleEntityError: If no row matched (changed or deleted meanwhile).
        """
        new_version = expected_version + 1
        stmt = (
            update(self.model)
            .where(
                self.model.id == entity_id,  # type: ignore[attr-defined]
                self.model.version == expected_version,  # type: ignore[attr-defined]
            )
            .values(**values, version=new_version)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            raise StaleEntityError(self.entity_name, entity_id, expected_version)
        return new_version

    def _delete_by_id(self, entity_id: int) -> bool:
        stmt = (
            delete(self.model)
            .where(self.model.id == entity_id)  # type: ignore[attr-defined]
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    # ------------------------------- Listing ---------------------------------

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
    ) -> Page[E]:
        """Paginate rows with stable sorting.

        :param pagination: Pagination parameters.
        :type pagination: Pagination
        :param filters: Equality filters (public keys).
        :type filters: Mapping[str, Any] | None
        :returns: :class:`Page` with ORM rows and metadata.
        :rtype: Page[E]
        """
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = _apply_sorting(
            stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr()
        )

        raw_items, total = paginate_select(
            self.session,
            stmt,
            page=pagination.page,
            limit=pagination.limit,
        )
        return Page(
            items=cast(list[E], raw_items),
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )
