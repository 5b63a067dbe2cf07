"""
vending.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`clock`:
    Defines :class:`~.Clock` plus :class:`~.SystemClock` and :class:`~.FrozenClock`.

- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`, :class:`~.TokenType` and :class:`~.IssuedToken`
    for signing and verifying access and refresh tokens.

- :mod:`session_store`:
    Defines :class:`~.SessionStore` and :class:`~.SessionRecord` for persisting
    refresh sessions, with :class:`~.InMemorySessionStore` for tests and
    single-process deployments.

- :mod:`credential_verifier`:
    Defines :class:`~.CredentialVerifier` for hashing and comparing passwords.

- :mod:`repositories`:
    Defines :class:`~.UserRepository`, :class:`~.ProductRepository` and their
    immutable records.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, PyJWT, Werkzeug) live under
``vending.repositories`` and ``vending.infra``.
"""

from __future__ import annotations

from .clock import Clock, FrozenClock, SystemClock
from .credential_verifier import CredentialVerifier
from .repositories import ProductRecord, ProductRepository, Role, UserRecord, UserRepository
from .session_store import InMemorySessionStore, SessionRecord, SessionStore
from .token_codec import IssuedToken, TokenCodec, TokenType

__all__ = [
    "Clock",
    "SystemClock",
    "FrozenClock",
    "CredentialVerifier",
    "ProductRecord",
    "ProductRepository",
    "Role",
    "UserRecord",
    "UserRepository",
    "InMemorySessionStore",
    "SessionRecord",
    "SessionStore",
    "IssuedToken",
    "TokenCodec",
    "TokenType",
]
