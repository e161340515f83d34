# sessionauth/services/accounts/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sessionauth.services._shared.ports import UserStatus
from sessionauth.services.sessions.dto import TokenPair


@dataclass(frozen=True, slots=True)
class RegisterIn:
    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public projection of a user row (no password material)."""

    id: int
    name: str
    email: str
    status: UserStatus
    registration_time: datetime
    last_login_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class AuthOut:
    """A user together with the session issued for it."""

    user: UserOut
    tokens: TokenPair
