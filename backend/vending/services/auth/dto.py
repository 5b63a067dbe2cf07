# vending/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from vending.services._shared.ports import UserRecord
from vending.services.tokens.dto import AuthTokensOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Login name (case-sensitive).
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a successful login.

    :param user: Authenticated user.
    :param tokens: Freshly issued access/refresh pair.
    :param active_sessions: Live sessions the user had *before* this login.
    """

    user: UserRecord
    tokens: AuthTokensOut
    active_sessions: int
