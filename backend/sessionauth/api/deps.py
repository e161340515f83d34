"""Shared API helpers for authentication and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from sessionauth.core.auth import get_auth
from sessionauth.core.errors import Forbidden, Unauthorized
from sessionauth.services.admission.dto import AdmissionDecision

F = TypeVar("F", bound=Callable[..., Any])


def require_auth(check_account: bool = True) -> Callable[[F], F]:
    """
    Admit the request through :class:`AdmissionService` or abort.

    The admitted user id is exposed as ``g.user_id``.

    :param check_account: Re-check the live account status (blocked or
        deleted users are denied). Disable only for operations that must
        succeed regardless of the account state, such as logout.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            admission = get_auth().admission.admit(
                request.headers.get("Authorization"), check_account=check_account
            )
            if admission.decision is AdmissionDecision.REJECTED_FORBIDDEN:
                raise Forbidden(admission.detail or "Forbidden")
            if not admission.admitted:
                raise Unauthorized(admission.detail or "Unauthorized")
            g.user_id = admission.subject
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def current_user_id() -> str:
    """Return the user id admitted by :func:`require_auth`."""
    return str(g.user_id)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
