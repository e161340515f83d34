"""User-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from sessionauth.services._shared.ports import UserStatus


class UserSchema(Schema):
    """Public representation of a user."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    status = fields.Enum(UserStatus, by_value=True)
    registration_time = fields.DateTime(data_key="registrationTime")
    last_login_time = fields.DateTime(data_key="lastLoginTime", allow_none=True)


class UserListQuerySchema(Schema):
    """Query string of ``GET /users``; unknown values fall back in the service."""

    sort_by = fields.String(data_key="sortBy", load_default=None)
    order = fields.String(load_default=None)


class UserIdsSchema(Schema):
    """Body carrying a non-empty list of user ids."""

    ids = fields.List(fields.Integer(strict=True), required=True, validate=validate.Length(min=1))


class UserStatusUpdateSchema(UserIdsSchema):
    """Body of ``PATCH /users``."""

    status = fields.Enum(
        UserStatus,
        by_value=True,
        required=True,
        validate=validate.OneOf([UserStatus.ACTIVE, UserStatus.BLOCKED]),
    )
