"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Service-level
fixtures wire the in-memory unit of work, session store and a frozen clock.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from vending.core.config import TestingConfig
from vending.core.extensions import db as _db  # Flask-SQLAlchemy instance
from vending.core.wiring import EXTENSION_KEY
from vending.factory import create_app  # application factory under test
from vending.infra.jwt.jwt_token_codec import JWTTokenCodec
from vending.infra.security.werkzeug_credential_verifier import WerkzeugCredentialVerifier
from vending.services._shared.ports import FrozenClock, InMemorySessionStore
from vending.services.coins import DEFAULT_DENOMINATIONS
from vending.services.tokens.dto import TokenConfig
from vending.services.tokens.service import TokenService
from vending.uow.memory_uow import InMemoryDatabase

TEST_PASSWORD = "secret1"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps refresh sessions in process (no Redis).
    - Uses a cheap password hash.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session.

    pysqlite does not emit ``BEGIN`` on its own, so a released SAVEPOINT would
    commit for real. The driver's transaction handling is switched off and
    ``BEGIN`` is emitted explicitly so SAVEPOINTs nest inside the test
    transaction.
    """
    conn = db.engine.connect()
    sqlite = db.engine.dialect.name == "sqlite"
    if sqlite:
        conn.connection.dbapi_connection.isolation_level = None
        event.listen(db.engine, "begin", _emit_begin)
    try:
        yield conn
    finally:
        conn.close()
        if sqlite:
            event.remove(db.engine, "begin", _emit_begin)


def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in an outer transaction.

    Notes
    -----
    The fixture follows the SQLAlchemy 2.0 recipe for joining a session into an
    external transaction: the test owns the top-level transaction and the
    session runs every transaction of its own as a SAVEPOINT
    (``join_transaction_mode="create_savepoint"``). A service that rolls back
    only discards its own work, and everything is undone when the test ends.
    Units of work built during the test pick the scoped session up through
    ``db.session``.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection; its commits release SAVEPOINTs
    SessionFactory = sessionmaker(
        bind=connection, join_transaction_mode="create_savepoint", autoflush=False
    )
    scoped = scoped_session(SessionFactory)

    # 3) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- HTTP ---------------------------------------------------------------------
@pytest.fixture()
def client(app, session):
    """Flask test client with a fresh session store per test.

    The service container lives on the session-scoped app, so the token
    related members are rebuilt to keep sessions from leaking across tests.
    """
    container = app.extensions[EXTENSION_KEY]
    for name in ("sessions", "tokens", "auth", "users"):
        container.__dict__.pop(name, None)
    with app.test_client() as c:
        yield c


# -- Service-level doubles ------------------------------------------------------
@pytest.fixture()
def clock() -> FrozenClock:
    """Clock frozen at 2024-01-01 UTC; advance it explicitly."""
    return FrozenClock(datetime(2024, 1, 1, tzinfo=UTC))


@pytest.fixture()
def codec(clock) -> JWTTokenCodec:
    return JWTTokenCodec(secret="unit-test-secret", clock=clock)


@pytest.fixture()
def session_store(clock) -> InMemorySessionStore:
    return InMemorySessionStore(clock)


@pytest.fixture()
def token_service(codec, session_store, clock) -> TokenService:
    return TokenService(codec=codec, sessions=session_store, clock=clock, config=TokenConfig())


@pytest.fixture()
def credentials() -> WerkzeugCredentialVerifier:
    return WerkzeugCredentialVerifier(method=TestConfig.PASSWORD_HASH_METHOD)


@pytest.fixture()
def memory_db() -> InMemoryDatabase:
    """Committed state shared by the in-memory units of work of one test."""
    return InMemoryDatabase()


@pytest.fixture()
def denominations() -> tuple[int, ...]:
    return DEFAULT_DENOMINATIONS
