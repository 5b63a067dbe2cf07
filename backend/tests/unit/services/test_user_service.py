# tests/unit/services/test_user_service.py
from __future__ import annotations

import pytest

from tests.helpers.memory import committed_product, committed_user, seed_product, seed_user
from vending.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    DomainValidationError,
    InvalidDenominationError,
    NameTakenError,
    NotFoundError,
)
from vending.services._shared.ports import Role
from vending.services.users.dto import UserCreateIn, UserListIn, UserUpdateIn
from vending.services.users.service import UserService, check_password_policy


@pytest.fixture()
def service(memory_db, credentials, token_service) -> UserService:
    return UserService(uow=memory_db, credentials=credentials, tokens=token_service)


class TestRegistration:
    def test_register_hashes_password_and_starts_empty(self, service, credentials):
        user = service.register_user(UserCreateIn(username="alice", password="abc1", role="buyer"))

        assert user.id is not None
        assert user.deposit == 0
        assert user.role is Role.BUYER
        assert user.password_hash != "abc1"
        assert credentials.compare("abc1", user.password_hash)

    def test_username_collision(self, service):
        service.register_user(UserCreateIn(username="alice", password="abc1", role="buyer"))
        with pytest.raises(NameTakenError):
            service.register_user(UserCreateIn(username="alice", password="abc1", role="seller"))

    def test_invalid_role(self, service):
        with pytest.raises(DomainValidationError) as info:
            service.register_user(UserCreateIn(username="x", password="abc1", role="admin"))
        assert info.value.field == "role"

    @pytest.mark.parametrize("password", ["ab1", "abcd", "1234", ""])
    def test_password_policy(self, password):
        with pytest.raises(DomainValidationError):
            check_password_policy(password)

    def test_password_policy_accepts(self):
        assert check_password_policy("a1b2") == "a1b2"


class TestSelfService:
    def test_update_own_username_and_password(self, service, memory_db, credentials):
        user = seed_user(memory_db, "alice")

        updated = service.update_user(
            user.id, user.id, UserUpdateIn(username="alicia", password="new1")
        )

        assert updated.username == "alicia"
        assert credentials.compare("new1", committed_user(memory_db, user.id).password_hash)

    def test_cannot_update_someone_else(self, service, memory_db):
        a = seed_user(memory_db, "a")
        b = seed_user(memory_db, "b")
        with pytest.raises(AuthorizationError):
            service.update_user(a.id, b.id, UserUpdateIn(username="hacked"))

    def test_rename_to_taken_username(self, service, memory_db):
        seed_user(memory_db, "taken")
        me = seed_user(memory_db, "me")
        with pytest.raises(NameTakenError):
            service.update_user(me.id, me.id, UserUpdateIn(username="taken"))

    def test_delete_seller_removes_products_and_sessions(
        self, service, memory_db, token_service
    ):
        seller = seed_user(memory_db, "seller", role=Role.SELLER)
        product = seed_product(memory_db, seller.id)
        pair = token_service.generate_auth_tokens(seller.id)

        service.delete_user(seller.id, seller.id)

        assert committed_user(memory_db, seller.id) is None
        assert committed_product(memory_db, product.id) is None
        with pytest.raises(AuthenticationError):
            token_service.refresh_auth(pair.refresh.token)

    def test_cannot_delete_someone_else(self, service, memory_db):
        a = seed_user(memory_db, "a")
        b = seed_user(memory_db, "b")
        with pytest.raises(AuthorizationError):
            service.delete_user(a.id, b.id)
        assert committed_user(memory_db, b.id) is not None

    def test_get_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.get_user(123)

    def test_query_by_role(self, service, memory_db):
        seed_user(memory_db, "b1")
        seed_user(memory_db, "s1", role=Role.SELLER)
        seed_user(memory_db, "b2")

        page = service.query_users(UserListIn(role="buyer", sort=["-username"]))

        assert [u.username for u in page.items] == ["b2", "b1"]
        assert page.total == 2


class TestDeposit:
    @pytest.mark.parametrize("coin", [5, 10, 20, 50, 100])
    def test_accepts_each_coin(self, service, memory_db, coin):
        buyer = seed_user(memory_db, "buyer", deposit=15)
        assert service.increase_deposit(buyer.id, coin).deposit == 15 + coin

    @pytest.mark.parametrize("coin", [3, 0, -5, 200, 25])
    def test_rejects_other_amounts(self, service, memory_db, coin):
        buyer = seed_user(memory_db, "buyer")
        with pytest.raises(InvalidDenominationError):
            service.increase_deposit(buyer.id, coin)
        assert committed_user(memory_db, buyer.id).deposit == 0

    def test_sellers_cannot_deposit(self, service, memory_db):
        seller = seed_user(memory_db, "seller", role=Role.SELLER)
        with pytest.raises(AuthorizationError):
            service.increase_deposit(seller.id, 5)
