# comments in English; reST docstrings
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from vending.services._shared.ports import (
    Clock,
    SessionRecord,
    SessionStore,
    SystemClock,
    TokenType,
)


@dataclass(slots=True)
class RedisSessionStore(SessionStore):
    """
    Redis-backed refresh session store.

    Layout:

    * ``sess:<sha256(token)>`` hash with ``token``, ``user_id``, ``type``,
      ``expires_at`` and ``blacklisted``; TTL follows ``expires_at``.
    * ``sess:u:<user_id>`` set of token digests owned by the user.

    :param r: A Redis client (already connected).
    :param clock: Time source for the TTL; it must agree with the one stamping
        ``expires_at``.
    """

    r: redis.Redis
    clock: Clock = field(default_factory=SystemClock)

    # -------------------- helpers --------------------

    @staticmethod
    def _digest(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    @classmethod
    def _k(cls, token: str) -> str:
        return f"sess:{cls._digest(token)}"

    @staticmethod
    def _kd(digest: str) -> str:
        return f"sess:{digest}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"sess:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        return int(dt.astimezone(UTC).timestamp())

    @staticmethod
    def _decode(h: dict[bytes, bytes]) -> SessionRecord:
        def _b(key: bytes, default: str = "") -> str:
            v = h.get(key)
            return v.decode() if v is not None else default

        return SessionRecord(
            token=_b(b"token"),
            user_id=_b(b"user_id"),
            type=TokenType(_b(b"type", TokenType.REFRESH.value)),
            expires_at=datetime.fromtimestamp(int(_b(b"expires_at", "0")), tz=UTC),
            blacklisted=_b(b"blacklisted", "0") == "1",
        )

    # -------------------- API ------------------------

    def save(self, session: SessionRecord) -> None:
        key = self._k(session.token)
        exp_ts = self._to_ts(session.expires_at)
        ttl = max(1, exp_ts - self._to_ts(self.clock.now()))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "token": session.token,
                "user_id": session.user_id,
                "type": session.type.value,
                "expires_at": str(exp_ts),
                "blacklisted": "1" if session.blacklisted else "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._ku(session.user_id), self._digest(session.token))
        pipe.execute()

    def find_by_value(self, token: str) -> SessionRecord | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return self._decode(h)

    def find_all_for_user(self, user_id: str) -> list[SessionRecord]:
        key_u = self._ku(user_id)
        digests = sorted(
            d.decode() if isinstance(d, bytes | bytearray) else str(d)
            for d in self.r.smembers(key_u)
        )

        found: list[SessionRecord] = []
        stale: list[str] = []
        for d in digests:
            h = self.r.hgetall(self._kd(d))
            if h:
                found.append(self._decode(h))
            else:
                # hash expired via TTL -> drop it from the index
                stale.append(d)

        if stale:
            self.r.srem(key_u, *stale)
        return found

    def delete_by_value(self, token: str) -> bool:
        key = self._k(token)
        uid_b = self.r.hget(key, "user_id")
        if not uid_b:
            return False

        with self.r.pipeline(transaction=True) as p:
            p.delete(key)
            p.srem(self._ku(uid_b.decode()), self._digest(token))
            out = cast(list[int], p.execute())

        # DEL is atomic: only one concurrent caller observes 1
        return bool(out[0])

    def delete_all_for_user(self, user_id: str) -> int:
        key_u = self._ku(user_id)
        digests = [
            d.decode() if isinstance(d, bytes | bytearray) else str(d)
            for d in self.r.smembers(key_u)
        ]
        if not digests:
            return 0
        pipe = self.r.pipeline(transaction=True)
        pipe.delete(*(self._kd(d) for d in digests))
        pipe.delete(key_u)
        out = cast(list[int], pipe.execute())
        return int(out[0])
