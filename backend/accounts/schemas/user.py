"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from accounts.models.banking_details import ACCOUNT_NUMBER_PATTERN, AGENCY_PATTERN
from accounts.models.user import ROLES


class BankingDetailsInSchema(Schema):
    """Agency and account number, digits only."""

    agency = fields.String(
        required=True,
        validate=validate.Regexp(AGENCY_PATTERN, error="Agency must contain 4 to 10 digits."),
    )
    account_number = fields.String(
        required=True,
        data_key="account",
        validate=validate.Regexp(
            ACCOUNT_NUMBER_PATTERN, error="Account must contain 5 to 20 digits."
        ),
    )


class UserUpdateSchema(Schema):
    """Partial profile update; omitted fields stay unchanged."""

    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email(validate=validate.Length(max=255))
    address = fields.String(validate=validate.Length(max=2000))
    profile_picture_url = fields.Url(
        data_key="profilePictureUrl", validate=validate.Length(max=500)
    )
    banking_details = fields.Nested(BankingDetailsInSchema, data_key="bankingDetails")


class UserFilterSchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None, validate=validate.Length(min=1, max=255))
    role = fields.String(load_default=None, validate=validate.OneOf(ROLES))


class BankingDetailsSchema(Schema):
    """Public representation of stored banking details."""

    agency = fields.String(required=True)
    account = fields.String(attribute="account_number", required=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)


class UserSchema(Schema):
    """Public representation of a user (never the password hash)."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    role = fields.String(required=True)
    address = fields.String(allow_none=True)
    profile_picture_url = fields.String(data_key="profilePictureUrl", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)


class UserProfileSchema(UserSchema):
    """User plus banking details, as returned by the users resource."""

    banking_details = fields.Nested(
        BankingDetailsSchema, data_key="bankingDetails", allow_none=True
    )

