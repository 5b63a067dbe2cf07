# vending/services/auth/service.py
from __future__ import annotations

import logging

from vending.services._shared.base import BaseService
from vending.services._shared.errors import AuthenticationError
from vending.services._shared.ports import CredentialVerifier, UserRecord
from vending.services.auth.dto import LoginIn, LoginOut
from vending.services.tokens.dto import AuthTokensOut
from vending.services.tokens.service import TokenService
from vending.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect username or password"


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    Credentials are checked against the user repository through a pluggable
    :class:`CredentialVerifier`; token issuance and session bookkeeping are
    delegated to :class:`TokenService`.
    """

    def __init__(
        self,
        *,
        uow: UnitOfWorkFactory,
        tokens: TokenService,
        credentials: CredentialVerifier,
    ) -> None:
        """
        :param uow: Unit of Work factory (user lookups).
        :param tokens: Token/session lifecycle service.
        :param credentials: Password hashing adapter.
        """
        super().__init__(uow=uow)
        self.tokens = tokens
        self.credentials = credentials

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login_user_with_username_and_password(self, username: str, password: str) -> UserRecord:
        """
        Resolve a user by credentials.

        Unknown usernames and wrong passwords fail identically.

        :raises AuthenticationError: If the credentials do not match.
        """
        with self.ro_uow() as uow:
            user = uow.users.find_by_username(username)
        if user is None or not self.credentials.compare(password, user.password_hash):
            log.info("auth.login_failed")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: User, token pair and the number of sessions that were live before.
        :raises AuthenticationError: If credentials are invalid.
        """
        user = self.login_user_with_username_and_password(dto.username, dto.password)
        active = len(self.tokens.get_all_tokens(user.id))
        tokens = self.tokens.generate_auth_tokens(user.id)
        log.info("auth.login", extra={"user_id": user.id, "active_sessions": active})
        return LoginOut(user=user, tokens=tokens, active_sessions=active)

    # ------------------------------------------------------------------ #
    # Session management
    # ------------------------------------------------------------------ #

    def logout(self, refresh_token: str) -> None:
        self.tokens.logout(refresh_token)

    def logout_all(self, refresh_token: str) -> int:
        return self.tokens.logout_all(refresh_token)

    def refresh_auth(self, refresh_token: str) -> AuthTokensOut:
        return self.tokens.refresh_auth(refresh_token)

    # ------------------------------------------------------------------ #
    # Request guard
    # ------------------------------------------------------------------ #

    def authenticate_access_token(self, access_token: str) -> UserRecord:
        """
        Resolve the user behind a bearer access token.

        The user is re-read on every call, so deleted accounts stop working
        immediately even while their access tokens are unexpired.

        :raises AuthenticationError: If the token is invalid or the user is gone.
        """
        subject = self.tokens.verify_access_token(access_token)
        try:
            user_id = int(subject)
        except ValueError as exc:
            raise AuthenticationError() from exc
        with self.ro_uow() as uow:
            user = uow.users.find_by_id(user_id)
        if user is None:
            raise AuthenticationError()
        return user
