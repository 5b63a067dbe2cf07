"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

ROLES = ("buyer", "seller")


class UserCreateSchema(Schema):
    """Payload for self-registration.

    Only the shape is checked here; the password policy lives in the service.
    """

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, load_only=True, validate=validate.Length(max=128))
    role = fields.String(required=True, validate=validate.OneOf(ROLES))


class UserUpdateSchema(Schema):
    """Partial self-update of username and/or password."""

    username = fields.String(validate=validate.Length(min=1, max=50))
    password = fields.String(load_only=True, validate=validate.Length(max=128))


class UserFilterSchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, validate=validate.Length(min=1, max=50))
    role = fields.String(load_default=None, validate=validate.OneOf(ROLES))


class DepositSchema(Schema):
    """A single inserted coin, in minor units."""

    deposit = fields.Integer(required=True, strict=True)


class UserSchema(Schema):
    """Public representation of a user; the password hash is never dumped."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    role = fields.Function(lambda user: getattr(user.role, "value", user.role))
    deposit = fields.Integer(required=True)
