"""User profile endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from accounts.api.deps import (
    get_profile_service,
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    timing,
)
from accounts.api.etag import set_response_etag
from accounts.schemas import (
    BankingDetailsInSchema,
    BankingDetailsSchema,
    MetaSchema,
    UserFilterSchema,
    UserProfileSchema,
    UserUpdateSchema,
)
from accounts.services.auth.dto import AuthenticatedIdentity
from accounts.services.users.dto import (
    BankingDetailsIn,
    BankingDetailsUpdateIn,
    UserListIn,
    UserUpdateIn,
)

bp = Blueprint("users", __name__, url_prefix="/users")

profile_schema = UserProfileSchema()
profile_list_schema = UserProfileSchema(many=True)
meta_schema = MetaSchema()
update_schema = UserUpdateSchema()
filter_schema = UserFilterSchema()
banking_in_schema = BankingDetailsInSchema()
banking_schema = BankingDetailsSchema()


@bp.get("")
@require_auth
@timing
def list_users(identity: AuthenticatedIdentity):
    """Return paginated users (admin or manager only)."""
    filters = {k: v for k, v in filter_schema.load(request.args).items() if v is not None}
    out = get_profile_service(identity).list_users(
        UserListIn(pagination=parse_pagination(), filters=filters)
    )
    return json_response(
        {"data": profile_list_schema.dump(out.items), "meta": meta_schema.dump(out.meta)}
    )


@bp.get("/<string:user_id>")
@require_auth
@timing
def get_user(user_id: str, identity: AuthenticatedIdentity):
    """Return one profile; owners and admins only."""
    user = get_profile_service(identity).get_user(user_id)
    response = json_response({"data": profile_schema.dump(user)})
    set_response_etag(response, user)
    return response


@bp.patch("/<string:user_id>")
@require_auth
@timing
def update_user(user_id: str, identity: AuthenticatedIdentity):
    """Partially update a profile, optionally with banking details."""
    data = update_schema.load(json_body())
    banking = data.get("banking_details")
    user = get_profile_service(identity).update_user(
        UserUpdateIn(
            user_id=user_id,
            name=data.get("name"),
            email=data.get("email"),
            address=data.get("address"),
            profile_picture_url=data.get("profile_picture_url"),
            banking_details=BankingDetailsIn(**banking) if banking else None,
        )
    )
    response = json_response({"data": profile_schema.dump(user)})
    set_response_etag(response, user)
    return response


@bp.patch("/<string:user_id>/banking-details")
@require_auth
@timing
def update_banking_details(user_id: str, identity: AuthenticatedIdentity):
    """Create or replace banking details and notify subscribers."""
    data = banking_in_schema.load(json_body())
    details = get_profile_service(identity).update_banking_details(
        BankingDetailsUpdateIn(user_id=user_id, banking_details=BankingDetailsIn(**data))
    )
    return json_response(
        {
            "data": {
                "message": "Banking details updated successfully",
                "bankingDetails": banking_schema.dump(details),
            }
        }
    )
