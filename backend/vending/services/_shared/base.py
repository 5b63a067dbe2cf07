# vending/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from vending.services._shared.dto import Pagination
from vending.services._shared.errors import (
    AuthorizationError,
    ConcurrencyConflictError,
    StaleEntityError,
)
from vending.services._shared.policies.common import has_role, is_owner
from vending.services._shared.ports import Role
from vending.uow.base import UnitOfWork, UnitOfWorkFactory

T = TypeVar("T")

log = logging.getLogger(__name__)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Retry optimistic-concurrency conflicts with fresh reads.
    * Offer shared validation helpers (pagination, ownership, role).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch a global session; they always go through a Unit of Work
      obtained from the injected factory.
    """

    def __init__(self, *, uow: UnitOfWorkFactory) -> None:
        """
        Initialize the base service.

        :param uow: Factory handing out read-write and read-only units of work.
        :type uow: UnitOfWorkFactory
        """
        self._uow = uow

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """Create a read-write Unit of Work."""
        return self._uow.writer()

    def ro_uow(self) -> UnitOfWork:
        """Create a read-only Unit of Work."""
        return self._uow.reader()

    def run_with_retries(
        self, fn: Callable[[int], T], *, attempts: int, entity: str = "Resource"
    ) -> T:
        """
        Run ``fn(attempt)`` until it stops raising :class:`StaleEntityError`.

        Each attempt must open its own unit of work so it re-reads fresh state.

        :param fn: Callable receiving the 1-based attempt number.
        :param attempts: Maximum number of attempts (``>= 1``).
        :param entity: Entity name reported if every attempt conflicts.
        :returns: Whatever ``fn`` returns on the first clean attempt.
        :raises ConcurrencyConflictError: When all attempts hit a stale version.
        """
        attempts = max(1, int(attempts))
        last: StaleEntityError | None = None
        for attempt in range(1, attempts + 1):
            try:
                return fn(attempt)
            except StaleEntityError as exc:
                last = exc
                log.info(
                    "optimistic.retry",
                    extra={"attempt": attempt, "entity": exc.entity, "key": exc.key},
                )
        raise ConcurrencyConflictError(
            entity, f"gave up after {attempts} concurrent modification(s)"
        ) from last

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :param limit: Page size.
        :param sort: Sort tokens like ["-cost", "product_name"].
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = max(1, int(limit))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        :param actor_id: Authenticated user id.
        :param owner_id: Expected owner user id.
        :param msg: Optional custom error message.
        :raises AuthorizationError: If actor is not the owner.
        """
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "Forbidden")

    def ensure_role(self, role: Role | str, required: Role, *, msg: str | None = None) -> None:
        """
        :raises AuthorizationError: If ``role`` is not ``required``.
        """
        if not has_role(role=role, required=required):
            raise AuthorizationError(msg or f"Only a {required.value} may do this")
