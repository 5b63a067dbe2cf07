"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .user import UserSchema


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshTokenSchema(Schema):
    """Input payload carrying a refresh token (logout, logout-all, refresh)."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenSchema(Schema):
    """One issued token with its absolute expiry."""

    token = fields.String(required=True)
    expires = fields.DateTime(required=True)


class AuthTokensSchema(Schema):
    """Access/refresh token pair."""

    access = fields.Nested(TokenSchema, required=True)
    refresh = fields.Nested(TokenSchema, required=True)


class LoginResponseSchema(Schema):
    """Response payload for a successful login."""

    user = fields.Nested(UserSchema, required=True)
    tokens = fields.Nested(AuthTokensSchema, required=True)
    active_sessions = fields.Integer(required=True)
