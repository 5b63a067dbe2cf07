"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between repositories,
ports, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``vending/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_products_product_name').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    # PostgreSQL includes the constraint name, SQLite only the column list
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, ports or domain logic.
    - The API layer translates them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Authentication / authorization
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Raised for bad credentials and invalid, expired or reused tokens."""

    def __init__(self, message: str = "Please authenticate") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when the actor is not allowed to touch a resource."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class TokenError(ServiceError):
    """Codec-level token failure. Never crosses the token service boundary."""


class TokenExpiredError(TokenError):
    """The token ``exp`` claim is in the past."""


class TokenInvalidSignatureError(TokenError):
    """The token cannot be decoded or its signature does not match."""


class TokenWrongTypeError(TokenError):
    """The token ``type`` claim differs from the expected one."""


# --------------------------------------------------------------------------- #
# Lookup / concurrency
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Product").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a write cannot be applied because of a conflicting state.

    :param entity: Entity name (e.g., "Product").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class ConcurrencyConflictError(ConflictError):
    """Raised when optimistic-concurrency retries are exhausted."""


@dataclass(slots=True)
class StaleEntityError(ServiceError):
    """
    Raised by a versioned ``save`` when the stored version moved on.

    :param entity: Entity name.
    :param key: Primary key of the row.
    :param expected_version: Version the caller read.
    """

    entity: str
    key: str | int
    expected_version: int | None = None

    def __str__(self) -> str:
        return f"{self.entity} {self.key} was modified concurrently"


# --------------------------------------------------------------------------- #
# Business rules (400) and validation (422)
# --------------------------------------------------------------------------- #


class BusinessRuleError(ServiceError):
    """A request that is well-formed but violates a business rule."""


class NameTakenError(BusinessRuleError):
    """A unique name (username, product name) is already in use."""

    def __init__(self, entity: str, name: str) -> None:
        super().__init__(f"{entity} name already taken")
        self.entity = entity
        self.name = name


class InsufficientInventoryError(BusinessRuleError):
    """Requested amount exceeds the product's available amount."""

    def __init__(self, message: str = "Not enough amount available") -> None:
        super().__init__(message)


class InsufficientFundsError(BusinessRuleError):
    """Purchase total exceeds the buyer's deposit."""

    def __init__(self, message: str = "Not enough deposit") -> None:
        super().__init__(message)


class InvalidDenominationError(BusinessRuleError):
    """A deposit that is not a single accepted coin."""


class InvalidAmountError(BusinessRuleError):
    """A negative, zero or non-integer amount where a count is expected."""


class UndecomposableAmountError(BusinessRuleError):
    """An amount that cannot be paid out exactly with the configured coins."""


class DomainValidationError(ServiceError):
    """
    Raised when a value violates a domain-level format rule.

    :param message: Human-readable summary.
    :param field: Offending field, when known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
