"""Role requirements per endpoint.

Keys are Flask endpoint names (``<blueprint>.<view>``). Endpoints missing from
the map accept any authenticated identity; ownership rules are enforced by
the services.
"""

from __future__ import annotations

from collections.abc import Mapping

ROUTE_ROLES: Mapping[str, tuple[str, ...]] = {
    "users.list_users": ("admin", "manager"),
}


def required_roles(endpoint: str | None) -> tuple[str, ...]:
    """Roles accepted by ``endpoint``; empty when unrestricted."""
    if endpoint is None:
        return ()
    return ROUTE_ROLES.get(endpoint, ())
