"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthTokensSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    TokenSchema,
)
from .common import MetaSchema, PaginationQuerySchema, SortQuerySchema, build_meta
from .product import (
    BuySchema,
    ProductCreateSchema,
    ProductFilterSchema,
    ProductSchema,
    ProductUpdateSchema,
    PurchaseSchema,
)
from .user import (
    DepositSchema,
    UserCreateSchema,
    UserFilterSchema,
    UserSchema,
    UserUpdateSchema,
)

__all__ = [
    "AuthTokensSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "TokenSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "MetaSchema",
    "build_meta",
    "BuySchema",
    "ProductCreateSchema",
    "ProductFilterSchema",
    "ProductSchema",
    "ProductUpdateSchema",
    "PurchaseSchema",
    "DepositSchema",
    "UserCreateSchema",
    "UserFilterSchema",
    "UserSchema",
    "UserUpdateSchema",
]
