"""User endpoints: profile, listing and bulk maintenance."""

from __future__ import annotations

from flask import Blueprint, request

from sessionauth.api.deps import current_user_id, json_response, require_auth, timing
from sessionauth.core.auth import get_auth
from sessionauth.schemas import (
    UserIdsSchema,
    UserListQuerySchema,
    UserSchema,
    UserStatusUpdateSchema,
)

bp = Blueprint("users", __name__)

user_schema = UserSchema()
users_schema = UserSchema(many=True)
list_query_schema = UserListQuerySchema()
ids_schema = UserIdsSchema()
status_schema = UserStatusUpdateSchema()


@bp.get("/me")
@require_auth()
@timing
def me():
    """Return the authenticated user's profile."""
    user = get_auth().accounts.get_profile(current_user_id())
    return json_response({"data": user_schema.dump(user)})


@bp.get("")
@require_auth()
@timing
def list_users():
    """List users sorted by ``sortBy`` (whitelisted) and ``order``."""
    query = list_query_schema.load(request.args)
    users = get_auth().accounts.list_users(sort_by=query["sort_by"], order=query["order"])
    return json_response({"data": users_schema.dump(users)})


@bp.delete("")
@require_auth()
@timing
def delete_users():
    """Permanently delete the listed users."""
    payload = ids_schema.load(request.get_json(silent=True) or {})
    count = get_auth().accounts.delete_many(payload["ids"])
    return json_response({"data": {"message": "Successfully deleted", "count": count}})


@bp.delete("/unverified")
@require_auth()
@timing
def delete_unverified():
    """Permanently delete every account that never activated."""
    count = get_auth().accounts.delete_unverified()
    return json_response({"data": {"message": "Successfully deleted", "count": count}})


@bp.patch("")
@require_auth()
@timing
def update_status():
    """Block or unblock the listed users."""
    payload = status_schema.load(request.get_json(silent=True) or {})
    count = get_auth().accounts.update_status_many(payload["ids"], payload["status"])
    return json_response({"data": {"message": "Successfully updated", "count": count}})
