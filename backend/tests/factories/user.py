"""Factory Boy definition for :class:`vending.models.user.User`."""

from __future__ import annotations

import factory
from werkzeug.security import generate_password_hash

from tests.factories import BaseFactory
from vending.models.user import User

DEFAULT_PASSWORD = "secret1"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`vending.models.user.User` instances.

    Notes
    -----
    - Buyers by default; use :class:`SellerFactory` for sellers.
    - ``password`` is a build-time parameter hashed into ``password_hash``.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"user{n}")
    role = "buyer"
    deposit = 0
    version = 1
    password_hash = factory.LazyAttribute(
        lambda o: generate_password_hash(o.password, method="pbkdf2:sha256:1000")
    )


class SellerFactory(UserFactory):
    """User with the seller role."""

    username = factory.Sequence(lambda n: f"seller{n}")
    role = "seller"
