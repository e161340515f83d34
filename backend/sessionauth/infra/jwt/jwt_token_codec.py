# sessionauth/infra/jwt/jwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt

from sessionauth.core.settings import AuthSettings
from sessionauth.services._shared.errors import InvalidCredentialError
from sessionauth.services._shared.ports import TokenCodec, TokenKind

_REQUIRED_CLAIMS = ["sub", "iat", "exp", "type"]


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    PyJWT adapter signing each token kind with its own HMAC secret.

    .. note::
       ``exp`` is required but not checked here; the token service compares it
       against the injected clock so expiry stays testable.
    """

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> JWTTokenCodec:
        return cls(
            access_secret=settings.access_secret,
            refresh_secret=settings.refresh_secret,
            algorithm=settings.algorithm,
        )

    def _secret(self, kind: TokenKind) -> str:
        return self.access_secret if kind is TokenKind.ACCESS else self.refresh_secret

    def encode(self, payload: dict[str, Any], *, kind: TokenKind) -> str:
        claims = dict(payload)
        claims["type"] = kind.value
        return jwt.encode(claims, self._secret(kind), algorithm=self.algorithm)

    def decode(self, token: str, *, kind: TokenKind) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise InvalidCredentialError("Malformed token")
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidCredentialError(f"Invalid token: {exc}") from exc

        if claims.get("type") != kind.value:
            raise InvalidCredentialError("Wrong token type")
        if kind is TokenKind.REFRESH and not claims.get("jti"):
            raise InvalidCredentialError("Refresh token without jti")
        return claims
