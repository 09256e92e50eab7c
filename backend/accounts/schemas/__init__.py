"""Convenience exports for request and response schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    TokenResponseSchema,
)
from .common import MetaSchema, PaginationQuerySchema
from .user import (
    BankingDetailsInSchema,
    BankingDetailsSchema,
    UserFilterSchema,
    UserProfileSchema,
    UserSchema,
    UserUpdateSchema,
)

__all__ = [
    "LoginSchema",
    "LoginResponseSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "RegisterResponseSchema",
    "TokenResponseSchema",
    "PaginationQuerySchema",
    "MetaSchema",
    "BankingDetailsInSchema",
    "BankingDetailsSchema",
    "UserFilterSchema",
    "UserProfileSchema",
    "UserSchema",
    "UserUpdateSchema",
]
