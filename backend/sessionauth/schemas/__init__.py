"""Marshmallow schemas for request validation and response serialization."""

from __future__ import annotations

from .auth import LoginSchema, RefreshTokenSchema, RegisterSchema, TokenPairSchema
from .users import UserIdsSchema, UserListQuerySchema, UserSchema, UserStatusUpdateSchema

__all__ = [
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserIdsSchema",
    "UserListQuerySchema",
    "UserSchema",
    "UserStatusUpdateSchema",
]
