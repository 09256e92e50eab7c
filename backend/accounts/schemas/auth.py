"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from .user import UserSchema


class RegisterSchema(Schema):
    """Input payload for account registration."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    address = fields.String(load_default=None, validate=validate.Length(max=2000))


class LoginSchema(Schema):
    """Input payload for authenticating a user.

    Password length is not checked here so a short wrong password is still a
    plain credential failure.
    """

    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Optional body of ``/auth/refresh``; the cookie is used when absent."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None, data_key="refreshToken")


class LogoutSchema(RefreshSchema):
    """Optional body of ``/auth/logout``."""


class TokenResponseSchema(Schema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class LoginResponseSchema(TokenResponseSchema):
    """Access token plus the authenticated user."""

    user = fields.Nested(UserSchema, required=True)


class RegisterResponseSchema(Schema):
    """Confirmation message plus the created user."""

    message = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)
