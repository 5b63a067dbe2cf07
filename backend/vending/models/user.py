"""User model definition for the vending machine."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from vending.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, VersionMixin

ROLES = ("buyer", "seller")


class User(PKMixin, ReprMixin, TimestampMixin, VersionMixin, db.Model):
    """
    Account that can log in, hold a deposit (buyers) or list products (sellers).

    Fields
    ------
    username : str
        Login name. Unique, case-sensitive, stored trimmed.
    password_hash : str
        Opaque credential hash produced by the credential verifier.
    role : str
        ``"buyer"`` or ``"seller"``.
    deposit : int
        Balance in minor currency units. Never negative.
    version : int
        Optimistic-concurrency counter (from mixin).
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="buyer")
    deposit: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        CheckConstraint("deposit >= 0", name="deposit_non_negative"),
        CheckConstraint("role IN ('buyer', 'seller')", name="role_valid"),
        Index("ix_users_role", "role"),
    )

    # -------------------- Validators --------------------
    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Trim and validate the username.

        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not v:
            raise ValueError("Username is required.")
        return v

    @validates("role")
    def _validate_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Role must be one of {ROLES}.")
        return value
