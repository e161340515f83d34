"""Token and session authentication service.

Expose the application factory so callers can ``from sessionauth import create_app``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
