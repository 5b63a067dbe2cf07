"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from vending.api.deps import json_response, load_json, no_content, timing
from vending.core.wiring import services
from vending.schemas import AuthTokensSchema, LoginResponseSchema, LoginSchema, RefreshTokenSchema
from vending.services.auth.dto import LoginIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
login_response_schema = LoginResponseSchema()
tokens_schema = AuthTokensSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = load_json(login_schema)
    result = services().auth.login(LoginIn(username=data["username"], password=data["password"]))
    return json_response({"data": login_response_schema.dump(result)})


@bp.post("/logout")
@timing
def logout():
    """Revoke the session behind one refresh token."""

    data = load_json(refresh_schema)
    services().auth.logout(data["refresh_token"])
    return no_content()


@bp.post("/logout-all")
@timing
def logout_all():
    """Revoke every session of the refresh token's owner."""

    data = load_json(refresh_schema)
    services().auth.logout_all(data["refresh_token"])
    return no_content()


@bp.post("/refresh-tokens")
@timing
def refresh_tokens():
    """Rotate a refresh token into a new pair; the old one stops working."""

    data = load_json(refresh_schema)
    tokens = services().auth.refresh_auth(data["refresh_token"])
    return json_response({"data": tokens_schema.dump(tokens)})
