"""Cross-origin policy for the JSON API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from sessionauth.core.logger import REQUEST_ID_HEADER

API_RESOURCES = r"/api/*"
ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", REQUEST_ID_HEADER]


def parse_origins(raw: str | None) -> list[str] | str:
    """
    Turn ``CORS_ORIGINS`` into what flask-cors expects.

    :returns: ``"*"`` for a blank value or ``"*"``, otherwise the list of
        trimmed origins.
    """
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """
    Apply the policy to ``/api/*``.

    Bearer tokens travel in the ``Authorization`` header, never in cookies,
    so credentials support is only turned on for an explicit origin list.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={API_RESOURCES: {"origins": origins}},
        methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        supports_credentials=origins != "*",
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
