# tests/unit/services/test_auth_service.py
from __future__ import annotations

import pytest

from tests.helpers.memory import seed_user
from vending.services._shared.errors import AuthenticationError
from vending.services._shared.ports import Role
from vending.services.auth.dto import LoginIn
from vending.services.auth.service import AuthService
from vending.uow.memory_uow import InMemoryUnitOfWork


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service(memory_db, token_service, credentials) -> AuthService:
    """AuthService wired to the in-memory unit of work and session store."""
    return AuthService(uow=memory_db, tokens=token_service, credentials=credentials)


@pytest.fixture()
def alice(memory_db, credentials):
    return seed_user(
        memory_db, "alice", role=Role.BUYER, password_hash=credentials.hash("secret1")
    )


# -------------------------------- Tests ----------------------------------- #
def test_login_returns_user_tokens_and_active_sessions(service, alice):
    first = service.login(LoginIn(username="alice", password="secret1"))
    second = service.login(LoginIn(username="alice", password="secret1"))

    assert first.user.id == alice.id
    assert first.active_sessions == 0
    assert second.active_sessions == 1
    assert first.tokens.refresh.token != second.tokens.refresh.token


@pytest.mark.parametrize(
    ("username", "password"),
    [("alice", "wrong1"), ("bob", "secret1"), ("Alice", "secret1")],
)
def test_login_rejects_bad_credentials_uniformly(service, alice, username, password):
    with pytest.raises(AuthenticationError, match="Incorrect username or password"):
        service.login(LoginIn(username=username, password=password))


def test_authenticate_access_token_rereads_user(service, alice, memory_db):
    out = service.login(LoginIn(username="alice", password="secret1"))

    assert service.authenticate_access_token(out.tokens.access.token).id == alice.id

    with InMemoryUnitOfWork(memory_db) as uow:
        uow.users.delete(alice.id)
    with pytest.raises(AuthenticationError):
        service.authenticate_access_token(out.tokens.access.token)


def test_refresh_logout_and_logout_all_delegate(service, alice):
    out = service.login(LoginIn(username="alice", password="secret1"))
    other = service.login(LoginIn(username="alice", password="secret1"))

    rotated = service.refresh_auth(out.tokens.refresh.token)
    service.logout(rotated.refresh.token)
    assert service.logout_all(other.tokens.refresh.token) == 1

    with pytest.raises(AuthenticationError):
        service.refresh_auth(other.tokens.refresh.token)
