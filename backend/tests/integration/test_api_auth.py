"""Integration tests for authentication endpoints."""

from __future__ import annotations

from tests.factories.user import UserFactory
from tests.helpers.assertions import assert_json_keys, assert_problem
from tests.helpers.utils import login

AUTH = "/api/v1/auth"


def test_login_returns_user_and_token_pair(client) -> None:
    """A registered user obtains an access/refresh pair."""

    user = UserFactory(username="alice")

    data = login(client, "alice")

    assert_json_keys(data, {"user", "tokens", "active_sessions"})
    assert data["user"]["id"] == user.id
    assert "password_hash" not in data["user"]
    assert_json_keys(data["tokens"]["access"], {"token", "expires"})
    assert_json_keys(data["tokens"]["refresh"], {"token", "expires"})
    assert data["active_sessions"] == 0


def test_second_login_reports_active_sessions(client) -> None:
    UserFactory(username="alice")
    login(client, "alice")

    assert login(client, "alice")["active_sessions"] == 1


def test_wrong_password_is_unauthorized(client) -> None:
    UserFactory(username="alice")

    resp = client.post(f"{AUTH}/login", json={"username": "alice", "password": "nope1"})

    body = assert_problem(resp, 401, "unauthorized")
    assert body["detail"] == "Incorrect username or password"


def test_login_requires_both_fields(client) -> None:
    resp = client.post(f"{AUTH}/login", json={"username": "alice"})

    body = assert_problem(resp, 422, "validation_error")
    assert "password" in body["details"]["errors"]


def test_refresh_rotates_the_refresh_token(client) -> None:
    UserFactory(username="alice")
    refresh = login(client, "alice")["tokens"]["refresh"]["token"]

    resp = client.post(f"{AUTH}/refresh-tokens", json={"refresh_token": refresh})
    assert resp.status_code == 200
    new_refresh = resp.get_json()["data"]["refresh"]["token"]
    assert new_refresh != refresh

    replay = client.post(f"{AUTH}/refresh-tokens", json={"refresh_token": refresh})
    assert_problem(replay, 401)


def test_access_token_cannot_refresh(client) -> None:
    UserFactory(username="alice")
    access = login(client, "alice")["tokens"]["access"]["token"]

    resp = client.post(f"{AUTH}/refresh-tokens", json={"refresh_token": access})

    assert_problem(resp, 401)


def test_logout_revokes_one_session(client) -> None:
    UserFactory(username="alice")
    first = login(client, "alice")["tokens"]["refresh"]["token"]
    second = login(client, "alice")["tokens"]["refresh"]["token"]

    resp = client.post(f"{AUTH}/logout", json={"refresh_token": first})
    assert resp.status_code == 204

    assert_problem(client.post(f"{AUTH}/logout", json={"refresh_token": first}), 401)
    ok = client.post(f"{AUTH}/refresh-tokens", json={"refresh_token": second})
    assert ok.status_code == 200


def test_logout_all_revokes_every_session(client) -> None:
    UserFactory(username="alice")
    first = login(client, "alice")["tokens"]["refresh"]["token"]
    second = login(client, "alice")["tokens"]["refresh"]["token"]

    resp = client.post(f"{AUTH}/logout-all", json={"refresh_token": second})
    assert resp.status_code == 204

    for token in (first, second):
        assert_problem(client.post(f"{AUTH}/refresh-tokens", json={"refresh_token": token}), 401)
    assert login(client, "alice")["active_sessions"] == 0


def test_protected_route_requires_bearer_token(client) -> None:
    assert_problem(client.get("/api/v1/users"), 401, "unauthorized")
    resp = client.get("/api/v1/users", headers={"Authorization": "Bearer not-a-jwt"})
    assert_problem(resp, 401, "unauthorized")


def test_refresh_token_is_not_an_access_token(client) -> None:
    UserFactory(username="alice")
    refresh = login(client, "alice")["tokens"]["refresh"]["token"]

    resp = client.get("/api/v1/users", headers={"Authorization": f"Bearer {refresh}"})

    assert_problem(resp, 401)
