from __future__ import annotations

from typing import Protocol


class CredentialVerifier(Protocol):
    """Port for password hashing and comparison."""

    def hash(self, plain: str) -> str: ...

    def compare(self, plain: str, hashed: str) -> bool: ...
