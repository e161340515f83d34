from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class UserStatus(str, Enum):
    """Account lifecycle states. Mutated by account management and activation."""

    UNVERIFIED = "UNVERIFIED"
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """Minimal live view of an account used by admission checks."""

    id: str
    status: UserStatus


class UserDirectory(Protocol):
    """Read-only lookup of the current account state."""

    def get_account(self, user_id: str) -> AccountSnapshot | None: ...


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed directory for unit tests."""

    def __init__(self) -> None:
        self._accounts: dict[str, UserStatus] = {}
        self._lock = threading.Lock()

    def put(self, user_id: str | int, status: UserStatus = UserStatus.ACTIVE) -> None:
        with self._lock:
            self._accounts[str(user_id)] = status

    def remove(self, user_id: str | int) -> None:
        with self._lock:
            self._accounts.pop(str(user_id), None)

    def get_account(self, user_id: str) -> AccountSnapshot | None:
        with self._lock:
            status = self._accounts.get(str(user_id))
        if status is None:
            return None
        return AccountSnapshot(id=str(user_id), status=status)
