"""
DTOs for UserService.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserCreateIn:
    """
    Input DTO for registration.

    :param username: Unique, case-sensitive login name.
    :type username: str
    :param password: Raw password; at least 4 chars with a letter and a digit.
    :type password: str
    :param role: ``"buyer"`` or ``"seller"``.
    :type role: str
    """

    username: str
    password: str = field(repr=False)
    role: str


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Self-service partial update; ``None`` leaves a field untouched.

    :param username: New login name.
    :param password: New raw password.
    """

    username: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class UserListIn:
    """
    Listing filters and pagination.

    :param username: Exact-name filter.
    :param role: Role filter.
    :param page: 1-based page.
    :param limit: Page size.
    :param sort: Sort tokens.
    """

    username: str | None = None
    role: str | None = None
    page: int = 1
    limit: int = 10
    sort: list[str] = field(default_factory=list)
