"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from tests.factories.user import SellerFactory, UserFactory
from vending.models.user import User


class TestUser:
    def test_defaults(self, session):
        u = User(username="tester", password_hash="x", role="buyer")
        session.add(u)
        session.flush()

        assert u.deposit == 0
        assert u.version == 1
        assert u.created_at is not None

    def test_username_is_trimmed(self, session):
        u = UserFactory(username="  spaced  ")
        assert u.username == "spaced"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_username_required(self, value):
        with pytest.raises(ValueError):
            User(username=value, password_hash="x", role="buyer")

    def test_role_validated(self):
        with pytest.raises(ValueError):
            User(username="x", password_hash="x", role="admin")

    def test_username_unique(self, session):
        UserFactory(username="bob")
        with pytest.raises(IntegrityError):
            SellerFactory(username="bob")

    def test_deposit_cannot_go_negative(self, session):
        with pytest.raises(IntegrityError):
            UserFactory(deposit=-5)
