from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol


class TokenType(str, Enum):
    """Value of the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    A freshly signed token.

    :ivar value: Encoded token string handed to the client.
    :ivar subject: User identity carried in ``sub``.
    :ivar type: Access or refresh.
    :ivar expires_at: Absolute expiration (UTC).
    """

    value: str
    subject: str
    type: TokenType
    expires_at: datetime


class TokenCodec(Protocol):
    """Port for signing and verifying time-bounded tokens."""

    def issue(self, *, subject: str | int, token_type: TokenType, ttl: timedelta) -> IssuedToken:
        """Sign a token for ``subject`` that expires ``ttl`` from now."""

    def verify(self, raw: str, expected_type: TokenType) -> str:
        """
        Verify ``raw`` and return its subject.

        :raises TokenInvalidSignatureError: Signature mismatch or undecodable token.
        :raises TokenExpiredError: ``exp`` is not after the current time.
        :raises TokenWrongTypeError: ``type`` differs from ``expected_type``.
        """
