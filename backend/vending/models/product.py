"""Product model definition."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from vending.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, VersionMixin


class Product(PKMixin, ReprMixin, TimestampMixin, VersionMixin, db.Model):
    """
    Item listed by a seller.

    Fields
    ------
    product_name : str
        Globally unique display name (trimmed).
    cost : int
        Unit price in minor units; services keep it aligned to the smallest coin.
    amount_available : int
        Units in stock. Never negative.
    seller_id : int
        Owning seller. Immutable after creation.
    """

    __tablename__ = "products"

    product_name: Mapped[str] = mapped_column(String(120), nullable=False)
    cost: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_available: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    seller_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("product_name", name="uq_products_product_name"),
        CheckConstraint("cost > 0", name="cost_positive"),
        CheckConstraint("amount_available >= 0", name="amount_available_non_negative"),
        Index("ix_products_seller_id", "seller_id"),
    )

    @validates("product_name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Product name is required.")
        return value.strip()
