"""Authentication endpoints: registration, login, refresh, logout, activation."""

from __future__ import annotations

from urllib.parse import quote

from flask import Blueprint, current_app, redirect, request

from sessionauth.api.deps import current_user_id, json_response, require_auth, timing
from sessionauth.core.auth import get_auth
from sessionauth.core.errors import Unauthorized
from sessionauth.core.extensions import limiter
from sessionauth.schemas import (
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from sessionauth.services._shared.errors import ActivationError, InvalidCredentialError
from sessionauth.services.accounts.dto import AuthOut, LoginIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _auth_body(out: AuthOut) -> dict:
    body = {"user": user_schema.dump(out.user)}
    body.update(token_schema.dump(out.tokens))
    return body


@bp.post("/register")
@timing
def register():
    """Create an unverified account, send its activation link and sign it in."""
    payload = register_schema.load(request.get_json(silent=True) or {})
    out = get_auth().accounts.register(RegisterIn(**payload))
    body = _auth_body(out)
    body["message"] = "Registration successful. Please check your email to activate your account."
    return json_response({"data": body}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a token pair."""
    payload = login_schema.load(request.get_json(silent=True) or {})
    out = get_auth().accounts.login(LoginIn(**payload))
    return json_response({"data": _auth_body(out)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""
    payload = refresh_schema.load(request.get_json(silent=True) or {})
    try:
        pair = get_auth().sessions.refresh_session(payload["refresh_token"])
    except InvalidCredentialError as exc:
        raise Unauthorized("Invalid refresh token") from exc
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth(check_account=False)
@timing
def logout():
    """Revoke the presented refresh token; always answers 204."""
    payload = refresh_schema.load(request.get_json(silent=True) or {})
    outcome = get_auth().sessions.terminate_session(payload["refresh_token"])
    current_app.logger.info(
        "auth.logout user_id=%s revoked=%s", current_user_id(), outcome.revoked
    )
    return "", 204


@bp.get("/activate/<token>")
@timing
def activate(token: str):
    """Activate the account behind ``token`` and redirect to the frontend."""
    frontend = get_auth().settings.frontend_activation_url
    try:
        get_auth().accounts.activate(token)
    except ActivationError as exc:
        return redirect(f"{frontend}/activation-failed?error={quote(str(exc))}")
    return redirect(f"{frontend}/activation-success")
