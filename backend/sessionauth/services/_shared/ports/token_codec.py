from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """Signed credential kinds. Each kind is signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenCodec(Protocol):
    """Port for signing and decoding bearer tokens."""

    def encode(self, payload: dict[str, Any], *, kind: TokenKind) -> str:
        """Sign ``payload`` with the secret of ``kind``."""

    def decode(self, token: str, *, kind: TokenKind) -> dict[str, Any]:
        """
        Verify signature and structure and return the claims.

        Expiry is *not* enforced here; the caller compares ``exp`` against its
        own clock.

        :raises InvalidCredentialError: On bad signature, malformed token or
            a token of another kind.
        """
