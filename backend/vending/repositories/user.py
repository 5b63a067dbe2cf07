"""User repository mapping ``users`` rows to :class:`UserRecord` snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from sqlalchemy.exc import IntegrityError

from vending.models.user import User
from vending.repositories.base import BaseRepository
from vending.services._shared.dto import Page, Pagination
from vending.services._shared.errors import NameTakenError, violates
from vending.services._shared.ports import Role, UserRecord, UserRepository


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        role=Role(row.role),
        deposit=row.deposit,
        version=row.version,
    )


class SQLAlchemyUserRepository(BaseRepository[User], UserRepository):
    """Persistence-only repository for :class:`User`.

    This repository NEVER hashes passwords or issues tokens; it stores what the
    service hands over and reports version conflicts.
    """

    model = User
    entity_name = "User"

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        """Expose sortable fields for safe public sorting."""
        return {
            "id": User.id,
            "username": User.username,
            "role": User.role,
            "deposit": User.deposit,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "username": User.username,
            "role": User.role,
        }

    # ---------------------------- Lookups ----------------------------

    def find_by_id(self, user_id: int) -> UserRecord | None:
        row = self._get_row(user_id)
        return _to_record(row) if row is not None else None

    def find_by_username(self, username: str) -> UserRecord | None:
        """Fetch a user by exact (trimmed) username.

        :param username: Login name; case-sensitive.
        :type username: str
        :returns: Snapshot or ``None`` when not found.
        :rtype: UserRecord | None
        """
        row = self._find_row(username=username.strip())
        return _to_record(row) if row is not None else None

    def username_taken(self, username: str, *, exclude_id: int | None = None) -> bool:
        clauses: list[Any] = [User.username == username.strip()]
        if exclude_id is not None:
            clauses.append(User.id != exclude_id)
        return self._exists(*clauses)

    def list_page(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[UserRecord]:
        page = self.paginate(pagination, filters=filters)
        return Page(
            items=[_to_record(r) for r in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )

    # ---------------------------- Writes ----------------------------

    def save(self, user: UserRecord) -> UserRecord:
        """Insert a new user or apply a version-checked update.

        :raises NameTakenError: If the username collides on insert/rename.
        :raises StaleEntityError: If the row changed since ``user`` was read.
        """
        values = {
            "username": user.username.strip(),
            "password_hash": user.password_hash,
            "role": Role(user.role).value,
            "deposit": user.deposit,
        }
        try:
            if user.id is None:
                row = self._insert(User(**values, version=1))
                return replace(user, id=row.id, username=row.username, version=row.version)
            new_version = self._versioned_update(user.id, user.version, values)
        except IntegrityError as exc:
            if violates(exc, "username") or violates(exc, "uq_users_username"):
                raise NameTakenError("User", user.username) from exc
            raise
        return replace(user, username=values["username"], version=new_version)

    def delete(self, user_id: int) -> bool:
        return self._delete_by_id(user_id)
