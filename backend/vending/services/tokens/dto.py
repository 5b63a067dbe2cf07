# vending/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# ------------------------ Config DTO --------------------------- #


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission configuration.

    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token (and session) lifetime.
    :type refresh_ttl: timedelta
    """

    access_ttl: timedelta = timedelta(minutes=30)
    refresh_ttl: timedelta = timedelta(days=30)


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenOut:
    """
    One issued token.

    :param token: Encoded JWT.
    :param expires: Absolute expiration (UTC).
    """

    token: str
    expires: datetime


@dataclass(frozen=True, slots=True)
class AuthTokensOut:
    """
    Access/refresh pair handed to the client.

    :param access: Short-lived bearer token (not persisted).
    :param refresh: Long-lived, single-use token mirrored by a session.
    """

    access: TokenOut
    refresh: TokenOut
