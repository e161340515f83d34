"""Repository package exposing persistence-layer access."""

from __future__ import annotations

from sessionauth.repositories.base import BaseRepository, apply_sorting
from sessionauth.repositories.user import UserRepository

__all__ = ["BaseRepository", "UserRepository", "apply_sorting"]
