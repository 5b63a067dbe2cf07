# vending/infra/jwt/jwt_token_codec.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from vending.services._shared.errors import (
    TokenExpiredError,
    TokenInvalidSignatureError,
    TokenWrongTypeError,
)
from vending.services._shared.ports import Clock, IssuedToken, SystemClock, TokenCodec, TokenType


def _new_jti() -> str:
    return uuid4().hex


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT adapter built on PyJWT.

    Expiry is checked against the injected clock instead of PyJWT's wall clock,
    so tests can drive token lifetimes deterministically.

    :param secret: Signing secret.
    :param algorithm: HMAC algorithm name.
    :param clock: Time source used for ``iat``/``exp`` and expiry checks.
    :param jti_factory: Generates the unique ``jti`` claim.
    """

    secret: str
    algorithm: str = "HS256"
    clock: Clock = field(default_factory=SystemClock)
    jti_factory: Callable[[], str] = _new_jti

    def issue(self, *, subject: str | int, token_type: TokenType, ttl: timedelta) -> IssuedToken:
        now = self.clock.now()
        exp = int((now + ttl).timestamp())
        payload: dict[str, Any] = {
            "sub": str(subject),
            "type": token_type.value,
            "iat": int(now.timestamp()),
            "exp": exp,
            # two tokens for the same subject issued in the same second must differ
            "jti": self.jti_factory(),
        }
        value = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return IssuedToken(
            value=value,
            subject=str(subject),
            type=token_type,
            expires_at=datetime.fromtimestamp(exp, tz=UTC),
        )

    def verify(self, raw: str, expected_type: TokenType) -> str:
        try:
            payload = jwt.decode(
                raw,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "type", "exp"],
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise TokenInvalidSignatureError("Token signature mismatch") from exc
        except jwt.PyJWTError as exc:
            raise TokenInvalidSignatureError("Malformed token") from exc

        if int(payload["exp"]) <= self.clock.now().timestamp():
            raise TokenExpiredError("Token expired")
        if payload["type"] != expected_type.value:
            raise TokenWrongTypeError(f"Expected a {expected_type.value} token")
        return str(payload["sub"])
