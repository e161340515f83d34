"""Structured JSON logging with request correlation and token redaction."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
REDACTED = "[redacted-token]"

# Structured extras copied verbatim into the JSON line when present
_EXTRA_KEYS = ("endpoint", "elapsed_ms")

# Three dot-separated base64url segments starting like a JOSE header ("eyJ")
_JWT_RE = re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")


def redact_tokens(text: str) -> str:
    """Replace anything shaped like a JWT in ``text`` with a placeholder."""
    return _JWT_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """
    Render log records as single-line JSON objects.

    Keys: ``time``, ``level``, ``name``, ``message``, ``request_id`` and
    ``user_id`` (``None`` outside a request or before admission), plus
    ``endpoint``/``elapsed_ms`` when passed through ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
            "user_id": getattr(record, "user_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update({k: getattr(record, k) for k in _EXTRA_KEYS if hasattr(record, k)})
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Attach ``request_id`` and the admitted ``user_id`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            if not hasattr(record, "user_id"):
                record.user_id = g.get("user_id")
        else:
            record.request_id = None
        return True


class TokenRedactionFilter(logging.Filter):
    """
    Scrub bearer tokens from the rendered message.

    Arguments are merged into ``msg`` first, so a token passed as a ``%s``
    argument is caught as well.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = redact_tokens(message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary."""
    if not has_request_context():
        return str(uuid4())
    if "request_id" in g:
        return g.request_id  # type: ignore[no-any-return]
    incoming = next(
        (value for value in (request.headers.get(h) for h in CORRELATION_HEADERS) if value),
        None,
    )
    g.request_id = incoming or str(uuid4())
    return g.request_id  # type: ignore[no-any-return]


def _resolve_level(level: str | int) -> int | str:
    if not isinstance(level, str):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else level.upper()


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single JSON stdout handler on the root logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(TokenRedactionFilter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Seed the request id per request and echo it on every response."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _inject_response_header(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "JSONFormatter",
    "RequestContextFilter",
    "TokenRedactionFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "redact_tokens",
]
