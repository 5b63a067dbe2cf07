from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from .clock import Clock, SystemClock
from .token_codec import TokenType


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    Server-side mirror of an issued refresh token.

    :ivar token: Raw refresh token value (unique).
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar type: Always ``refresh``; access tokens are never persisted.
    :ivar blacklisted: Soft-revocation marker.
    """

    token: str
    user_id: str
    expires_at: datetime
    type: TokenType = TokenType.REFRESH
    blacklisted: bool = False

    def is_live(self, now: datetime) -> bool:
        """A session is live iff it is neither expired nor blacklisted."""
        return not self.blacklisted and self.expires_at > now


class SessionStore(Protocol):
    """
    Persistence port for refresh sessions.

    Every operation MUST be atomic with respect to a single session.
    ``delete_by_value`` is the serialization point for rotation: when several
    callers race on the same token, exactly one of them gets ``True``.
    """

    def save(self, session: SessionRecord) -> None:
        """Insert or overwrite the session keyed by ``session.token``."""

    def find_by_value(self, token: str) -> SessionRecord | None:
        """Fetch a session by its raw token value (if present)."""

    def find_all_for_user(self, user_id: str) -> list[SessionRecord]:
        """List the user's stored sessions; expired ones may already be gone."""

    def delete_by_value(self, token: str) -> bool:
        """Delete one session. :returns: True if this call removed it."""

    def delete_all_for_user(self, user_id: str) -> int:
        """
        Delete all sessions of the user.

        :returns: Number of sessions removed.
        """


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Expired sessions are dropped on ``save`` and ``find_all_for_user``, and a
    user's index entry goes away with its last session, so memory tracks the
    live sessions only.

    .. note::
       Uses a threading lock so rotation races behave like a real store.

    :param clock: Time source deciding expiry. Defaults to the wall clock.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._by_token: dict[str, SessionRecord] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def save(self, session: SessionRecord) -> None:
        with self._lock:
            self._prune(self._clock.now())
            previous = self._by_token.get(session.token)
            if previous is not None and previous.user_id != session.user_id:
                self._unindex(previous.user_id, session.token)
            self._by_token[session.token] = session
            self._by_user.setdefault(session.user_id, set()).add(session.token)

    def find_by_value(self, token: str) -> SessionRecord | None:
        with self._lock:
            return self._by_token.get(token)

    def find_all_for_user(self, user_id: str) -> list[SessionRecord]:
        with self._lock:
            now = self._clock.now()
            for t in list(self._by_user.get(user_id, ())):
                if self._by_token[t].expires_at <= now:
                    del self._by_token[t]
                    self._unindex(user_id, t)
            tokens = sorted(self._by_user.get(user_id, ()))
            return [self._by_token[t] for t in tokens]

    def delete_by_value(self, token: str) -> bool:
        with self._lock:
            session = self._by_token.pop(token, None)
            if session is None:
                return False
            self._unindex(session.user_id, token)
            return True

    def delete_all_for_user(self, user_id: str) -> int:
        with self._lock:
            tokens = self._by_user.pop(user_id, set())
            removed = 0
            for t in tokens:
                if self._by_token.pop(t, None) is not None:
                    removed += 1
            return removed

    # Caller holds the lock for the helpers below.

    def _unindex(self, user_id: str, token: str) -> None:
        tokens = self._by_user.get(user_id)
        if tokens is None:
            return
        tokens.discard(token)
        if not tokens:
            del self._by_user[user_id]

    def _prune(self, now: datetime) -> None:
        expired = [s for s in self._by_token.values() if s.expires_at <= now]
        for s in expired:
            del self._by_token[s.token]
            self._unindex(s.user_id, s.token)
