"""Shared API helpers: authentication, service lookup, parsing and timing."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from accounts.api.access import required_roles
from accounts.core.logger import ensure_request_id
from accounts.core.security import (
    CREDENTIAL_SERVICE_KEY,
    EVENT_PUBLISHER_KEY,
    KV_STORE_KEY,
    SESSION_MANAGER_KEY,
)
from accounts.schemas.common import PaginationQuerySchema
from accounts.services._shared.base import ServiceContext
from accounts.services._shared.dto import PaginationIn
from accounts.services._shared.errors import AuthenticationError
from accounts.services.auth.authorization import enforce_roles
from accounts.services.auth.dto import AuthenticatedIdentity
from accounts.services.auth.service import CredentialService
from accounts.services.auth.session_manager import SessionManager
from accounts.services.users.service import UserProfileService

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


# ------------------------------ Services ------------------------------------


def get_session_manager() -> SessionManager:
    return cast(SessionManager, current_app.extensions[SESSION_MANAGER_KEY])


def get_credential_service() -> CredentialService:
    return cast(CredentialService, current_app.extensions[CREDENTIAL_SERVICE_KEY])


def get_profile_service(identity: AuthenticatedIdentity) -> UserProfileService:
    """Build a :class:`UserProfileService` acting on behalf of ``identity``."""
    return UserProfileService(
        cache=current_app.extensions[KV_STORE_KEY],
        events=current_app.extensions[EVENT_PUBLISHER_KEY],
        cache_ttl=int(current_app.config.get("REDIS_CACHE_TTL", 3600)),
        ctx=ServiceContext(
            actor_id=identity.user_id,
            actor_role=identity.role,
            request_id=ensure_request_id(),
        ),
    )


# --------------------------- Authentication ---------------------------------


def bearer_token() -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(func: F) -> F:
    """Verify the bearer access token and pass the identity to the view.

    The view receives ``identity`` (:class:`AuthenticatedIdentity`) as a
    keyword argument. Role requirements come from
    :data:`accounts.api.access.ROUTE_ROLES`.

    A missing header and any verification failure produce the same 401.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            log.info("request rejected: no bearer token", extra={"endpoint": request.endpoint})
            raise AuthenticationError()
        claims = get_session_manager().verify_access_token(token)
        identity = AuthenticatedIdentity.from_claims(claims)
        enforce_roles(identity, required_roles(request.endpoint))
        return func(*args, identity=identity, **kwargs)

    return wrapper  # type: ignore[return-value]


# ------------------------------ Parsing -------------------------------------


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> PaginationIn:
    """Parse ``page``, ``limit`` and ``sort`` from ``request.args``."""
    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"], sort=data["sort"])


def json_body() -> dict[str, Any]:
    """Return the JSON body as a dict; missing or non-object bodies become ``{}``."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


# ------------------------------ Responses -----------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response with the given status."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Log handler execution time in milliseconds at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
