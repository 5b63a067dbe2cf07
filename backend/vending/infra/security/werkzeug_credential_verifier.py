"""Password hashing backed by Werkzeug."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from vending.services._shared.ports import CredentialVerifier


class WerkzeugCredentialVerifier(CredentialVerifier):
    """
    Salted password hashes via :mod:`werkzeug.security`.

    :param method: Hash method passed to ``generate_password_hash``; ``None``
        keeps Werkzeug's default. Tests use a cheap pbkdf2 variant.
    """

    def __init__(self, method: str | None = None) -> None:
        self.method = method

    def hash(self, plain: str) -> str:
        if not isinstance(plain, str) or not plain:
            raise ValueError("Password must be a non-empty string.")
        if self.method:
            return str(generate_password_hash(plain, method=self.method))
        return str(generate_password_hash(plain))

    def compare(self, plain: str, hashed: str) -> bool:
        if not hashed:
            return False
        # ``check_password_hash`` is untyped; coerce for mypy.
        return bool(check_password_hash(hashed, plain))
