"""Service container binding ports to their adapters for one Flask app."""

from __future__ import annotations

from datetime import timedelta
from functools import cached_property
from typing import Any, cast

from flask import Flask, current_app

from vending.core.config import parse_denominations
from vending.infra.jwt.jwt_token_codec import JWTTokenCodec
from vending.infra.redis.redis_session_store import RedisSessionStore
from vending.infra.security.werkzeug_credential_verifier import WerkzeugCredentialVerifier
from vending.services._shared.ports import (
    Clock,
    InMemorySessionStore,
    SessionStore,
    SystemClock,
)
from vending.services.auth.service import AuthService
from vending.services.products.service import ProductService
from vending.services.purchases.service import PurchaseService
from vending.services.tokens.dto import TokenConfig
from vending.services.tokens.service import TokenService
from vending.services.users.service import UserService
from vending.uow.base import UnitOfWorkFactory
from vending.uow.sqlalchemy_uow import SQLAlchemyUnitOfWorkFactory

EXTENSION_KEY = "vending.services"


class ServiceContainer:
    """
    Lazily builds the services from app config.

    Every attribute is a ``cached_property`` so tests can pre-seed any of them
    (``container.__dict__["clock"] = FrozenClock()``) before first use.
    """

    def __init__(self, config: Any, *, redis_client: Any = None) -> None:
        self.config = config
        self.redis_client = redis_client

    # ----------------------------- settings -----------------------------

    @cached_property
    def denominations(self) -> tuple[int, ...]:
        return parse_denominations(self.config["COIN_DENOMINATIONS"])

    @cached_property
    def max_retries(self) -> int:
        return int(self.config.get("PURCHASE_MAX_RETRIES", 3))

    @cached_property
    def token_config(self) -> TokenConfig:
        return TokenConfig(
            access_ttl=timedelta(minutes=int(self.config["ACCESS_TOKEN_EXPIRES_MINUTES"])),
            refresh_ttl=timedelta(days=int(self.config["REFRESH_TOKEN_EXPIRES_DAYS"])),
        )

    # ----------------------------- adapters -----------------------------

    @cached_property
    def clock(self) -> Clock:
        return SystemClock()

    @cached_property
    def codec(self) -> JWTTokenCodec:
        return JWTTokenCodec(
            secret=self.config["JWT_SECRET_KEY"],
            algorithm=self.config.get("JWT_ALGORITHM", "HS256"),
            clock=self.clock,
        )

    @cached_property
    def sessions(self) -> SessionStore:
        if self.redis_client is not None:
            return RedisSessionStore(self.redis_client, clock=self.clock)
        return InMemorySessionStore(self.clock)

    @cached_property
    def credentials(self) -> WerkzeugCredentialVerifier:
        return WerkzeugCredentialVerifier(method=self.config.get("PASSWORD_HASH_METHOD"))

    @cached_property
    def uow(self) -> UnitOfWorkFactory:
        return SQLAlchemyUnitOfWorkFactory()

    # ----------------------------- services -----------------------------

    @cached_property
    def tokens(self) -> TokenService:
        return TokenService(
            codec=self.codec, sessions=self.sessions, clock=self.clock, config=self.token_config
        )

    @cached_property
    def auth(self) -> AuthService:
        return AuthService(uow=self.uow, tokens=self.tokens, credentials=self.credentials)

    @cached_property
    def users(self) -> UserService:
        return UserService(
            uow=self.uow,
            credentials=self.credentials,
            tokens=self.tokens,
            denominations=self.denominations,
            max_retries=self.max_retries,
        )

    @cached_property
    def products(self) -> ProductService:
        return ProductService(
            uow=self.uow, denominations=self.denominations, max_retries=self.max_retries
        )

    @cached_property
    def purchases(self) -> PurchaseService:
        return PurchaseService(
            uow=self.uow, denominations=self.denominations, max_retries=self.max_retries
        )


def init_app(app: Flask) -> ServiceContainer:
    """Build the container and register it on ``app.extensions``.

    The coin set is parsed eagerly so a bad ``COIN_DENOMINATIONS`` fails at startup.
    """
    container = ServiceContainer(app.config, redis_client=app.extensions.get("redis_client"))
    _ = container.denominations
    app.extensions[EXTENSION_KEY] = container
    return container


def services() -> ServiceContainer:
    """Return the container of the current app."""
    return cast(ServiceContainer, current_app.extensions[EXTENSION_KEY])
