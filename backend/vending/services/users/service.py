"""
UserService
===========

Registration, lookup and self-service management of accounts, plus coin
deposits for buyers.

Notes
-----
- Users may only modify or delete their own account.
- Deleting an account revokes all its refresh sessions; a seller's products are
  removed together with the account.
- Deposits accept exactly one coin of the configured denominations per call.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import replace

from vending.services._shared.base import BaseService
from vending.services._shared.dto import Page
from vending.services._shared.errors import (
    DomainValidationError,
    InvalidDenominationError,
    NameTakenError,
    NotFoundError,
)
from vending.services._shared.ports import CredentialVerifier, Role, UserRecord
from vending.services.coins import DEFAULT_DENOMINATIONS, is_valid_denomination
from vending.services.tokens.service import TokenService
from vending.services.users.dto import UserCreateIn, UserListIn, UserUpdateIn
from vending.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 4
_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"\d")


def check_password_policy(password: object) -> str:
    """
    Enforce the password policy.

    :raises DomainValidationError: If shorter than 4 chars or missing a letter or digit.
    """
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise DomainValidationError(
            f"password must be at least {PASSWORD_MIN_LENGTH} characters", field="password"
        )
    if not _HAS_LETTER.search(password) or not _HAS_DIGIT.search(password):
        raise DomainValidationError(
            "password must contain at least 1 letter and 1 number", field="password"
        )
    return password


def _check_username(username: object) -> str:
    if not isinstance(username, str) or not username.strip():
        raise DomainValidationError("username is required", field="username")
    return username.strip()


def _check_role(role: object) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise DomainValidationError("role must be buyer or seller", field="role") from exc


class UserService(BaseService):
    """
    Application service for the ``User`` aggregate.

    :param uow: Unit of Work factory.
    :param credentials: Password hashing adapter.
    :param tokens: Token service, used to revoke sessions of deleted users.
    :param denominations: Coins accepted by :meth:`increase_deposit`.
    :param max_retries: Attempts for writes racing with purchases.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWorkFactory,
        credentials: CredentialVerifier,
        tokens: TokenService,
        denominations: Sequence[int] = DEFAULT_DENOMINATIONS,
        max_retries: int = 3,
    ) -> None:
        super().__init__(uow=uow)
        self.credentials = credentials
        self.tokens = tokens
        self.denominations = tuple(denominations)
        self.max_retries = max_retries

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register_user(self, dto: UserCreateIn) -> UserRecord:
        """
        Create an account with a zero deposit.

        :raises DomainValidationError: If username, password or role are invalid.
        :raises NameTakenError: If the username is already in use.
        """
        username = _check_username(dto.username)
        password = check_password_policy(dto.password)
        role = _check_role(dto.role)

        with self.rw_uow() as uow:
            if uow.users.username_taken(username):
                raise NameTakenError("User", username)
            user = uow.users.save(
                UserRecord(
                    id=None,
                    username=username,
                    password_hash=self.credentials.hash(password),
                    role=role,
                    deposit=0,
                )
            )
        log.info("user.registered", extra={"user_id": user.id, "role": role.value})
        return user

    # --------------------------------------------------------------------- #
    # Queries
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserRecord:
        with self.ro_uow() as uow:
            user = uow.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def query_users(self, dto: UserListIn) -> Page[UserRecord]:
        """Page through users, optionally filtered by exact username and role."""
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        filters = {"username": dto.username, "role": dto.role}
        with self.ro_uow() as uow:
            return uow.users.list_page(pagination, filters=filters)

    # --------------------------------------------------------------------- #
    # Self-service
    # --------------------------------------------------------------------- #

    def update_user(self, actor_id: int, user_id: int, dto: UserUpdateIn) -> UserRecord:
        """
        Change one's own username and/or password.

        :raises AuthorizationError: If ``actor_id`` is not ``user_id``.
        :raises NotFoundError: If the user does not exist.
        :raises NameTakenError: If the new username is taken by someone else.
        :raises DomainValidationError: If the new values are malformed.
        """
        self.ensure_owner(actor_id, user_id)
        changes: dict[str, object] = {}
        if dto.username is not None:
            changes["username"] = _check_username(dto.username)
        if dto.password is not None:
            changes["password_hash"] = self.credentials.hash(check_password_policy(dto.password))

        def attempt(_: int) -> UserRecord:
            with self.rw_uow() as uow:
                user = uow.users.find_by_id(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                new_name = changes.get("username")
                if new_name is not None and uow.users.username_taken(
                    str(new_name), exclude_id=user_id
                ):
                    raise NameTakenError("User", str(new_name))
                if not changes:
                    return user
                return uow.users.save(replace(user, **changes))

        updated = self.run_with_retries(attempt, attempts=self.max_retries, entity="User")
        log.info("user.updated", extra={"user_id": user_id})
        return updated

    def delete_user(self, actor_id: int, user_id: int) -> None:
        """
        Delete one's own account, its products and all its sessions.

        :raises AuthorizationError: If ``actor_id`` is not ``user_id``.
        :raises NotFoundError: If the user does not exist.
        """
        self.ensure_owner(actor_id, user_id)
        with self.rw_uow() as uow:
            user = uow.users.find_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if user.role == Role.SELLER:
                uow.products.delete_by_seller(user_id)
            uow.users.delete(user_id)
        revoked = self.tokens.revoke_all_for_user(user_id)
        log.info("user.deleted", extra={"user_id": user_id, "removed": revoked})

    # --------------------------------------------------------------------- #
    # Deposits
    # --------------------------------------------------------------------- #

    def increase_deposit(self, user_id: int, coin: int) -> UserRecord:
        """
        Add a single coin to a buyer's deposit.

        :raises InvalidDenominationError: If ``coin`` is not an accepted coin.
        :raises NotFoundError: If the user does not exist.
        :raises AuthorizationError: If the user is not a buyer.
        """
        if not is_valid_denomination(coin, self.denominations):
            coins = ", ".join(str(c) for c in self.denominations)
            raise InvalidDenominationError(f"deposit can only be {coins} cent coins")

        def attempt(_: int) -> UserRecord:
            with self.rw_uow() as uow:
                user = uow.users.find_by_id(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                self.ensure_role(user.role, Role.BUYER)
                return uow.users.save(replace(user, deposit=user.deposit + coin))

        updated = self.run_with_retries(attempt, attempts=self.max_retries, entity="User")
        log.info("user.deposit", extra={"user_id": user_id, "amount": coin})
        return updated
