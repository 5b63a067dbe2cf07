"""
TokenService
============

Issues, rotates and revokes access/refresh token pairs.

- Access tokens are stateless; only their signature and expiry are checked.
- Every refresh token is mirrored by a :class:`SessionRecord`. A refresh is
  accepted only while its session is live, and consuming it deletes the session,
  so each refresh token works exactly once.
- ``SessionStore.delete_by_value`` is the serialization point: when several
  refreshes race on the same token, only the caller whose delete succeeded
  gets a new pair.

Codec failures (expired, bad signature, wrong type) never leave this module;
they are reported as :class:`AuthenticationError`.
"""

from __future__ import annotations

import logging

from vending.services._shared.errors import AuthenticationError, TokenError
from vending.services._shared.ports import (
    Clock,
    SessionRecord,
    SessionStore,
    SystemClock,
    TokenCodec,
    TokenType,
)
from vending.services.tokens.dto import AuthTokensOut, TokenConfig, TokenOut

log = logging.getLogger(__name__)


class TokenService:
    """
    Token and session lifecycle.

    :param codec: Signs and verifies tokens.
    :param sessions: Stores refresh sessions.
    :param clock: Time source for liveness checks.
    :param config: Token lifetimes.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        sessions: SessionStore,
        clock: Clock | None = None,
        config: TokenConfig | None = None,
    ) -> None:
        self.codec = codec
        self.sessions = sessions
        self.clock = clock or SystemClock()
        self.cfg = config or TokenConfig()

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def generate_auth_tokens(self, user_id: int | str) -> AuthTokensOut:
        """
        Issue a fresh access/refresh pair and persist the refresh session.

        :param user_id: Subject of both tokens.
        :returns: Both token values with their expirations.
        """
        access = self.codec.issue(
            subject=user_id, token_type=TokenType.ACCESS, ttl=self.cfg.access_ttl
        )
        refresh = self.codec.issue(
            subject=user_id, token_type=TokenType.REFRESH, ttl=self.cfg.refresh_ttl
        )
        self.sessions.save(
            SessionRecord(
                token=refresh.value,
                user_id=str(user_id),
                expires_at=refresh.expires_at,
                type=TokenType.REFRESH,
            )
        )
        log.info("tokens.issued", extra={"user_id": str(user_id)})
        return AuthTokensOut(
            access=TokenOut(token=access.value, expires=access.expires_at),
            refresh=TokenOut(token=refresh.value, expires=refresh.expires_at),
        )

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_all_tokens(self, user_id: int | str) -> list[SessionRecord]:
        """Return the user's live sessions (expired and blacklisted ones are skipped)."""
        now = self.clock.now()
        return [s for s in self.sessions.find_all_for_user(str(user_id)) if s.is_live(now)]

    def verify_access_token(self, access_token: str) -> str:
        """
        Check an access token and return its subject.

        :raises AuthenticationError: If the token is expired, forged or a refresh token.
        """
        return self._verify(access_token, TokenType.ACCESS)

    # ------------------------------------------------------------------ #
    # Rotation / revocation
    # ------------------------------------------------------------------ #

    def refresh_auth(self, refresh_token: str) -> AuthTokensOut:
        """
        Consume a refresh token and issue a new pair for its subject.

        :raises AuthenticationError: If the token is invalid, its session is gone
            (already rotated or logged out) or another caller consumed it first.
        """
        subject = self._verify(refresh_token, TokenType.REFRESH)
        self._require_live_session(refresh_token, subject)
        if not self.sessions.delete_by_value(refresh_token):
            # lost the race against a concurrent refresh/logout
            raise AuthenticationError()
        log.info("tokens.rotated", extra={"user_id": subject})
        return self.generate_auth_tokens(subject)

    def logout(self, refresh_token: str) -> None:
        """
        Delete the session behind ``refresh_token``.

        :raises AuthenticationError: If no live session matches (e.g. repeated logout).
        """
        session = self.sessions.find_by_value(refresh_token)
        if session is None or not session.is_live(self.clock.now()):
            raise AuthenticationError("Session not found")
        if not self.sessions.delete_by_value(refresh_token):
            raise AuthenticationError("Session not found")
        log.info("tokens.logout", extra={"user_id": session.user_id})

    def logout_all(self, refresh_token: str) -> int:
        """
        Delete every session of the token's subject.

        The presented token must still be valid and have a live session.

        :returns: Number of sessions removed.
        """
        subject = self._verify(refresh_token, TokenType.REFRESH)
        self._require_live_session(refresh_token, subject)
        removed = self.revoke_all_for_user(subject)
        log.info("tokens.logout_all", extra={"user_id": subject, "removed": removed})
        return removed

    def revoke_all_for_user(self, user_id: int | str) -> int:
        """Drop all sessions of ``user_id`` without any token check."""
        return self.sessions.delete_all_for_user(str(user_id))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _verify(self, raw: str, expected: TokenType) -> str:
        if not raw:
            raise AuthenticationError()
        try:
            return self.codec.verify(raw, expected)
        except TokenError as exc:
            log.info("tokens.rejected", extra={"reason": type(exc).__name__})
            raise AuthenticationError() from exc

    def _require_live_session(self, raw: str, subject: str) -> SessionRecord:
        session = self.sessions.find_by_value(raw)
        if session is None or session.user_id != subject or not session.is_live(self.clock.now()):
            raise AuthenticationError()
        return session
