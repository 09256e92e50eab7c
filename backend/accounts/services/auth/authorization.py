"""Role-based access decisions over an already verified identity."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from accounts.services._shared.errors import AuthorizationError
from accounts.services.auth.dto import AuthenticatedIdentity


@dataclass(frozen=True, slots=True)
class AccessDecision:
    """
    Outcome of a role check.

    :param allowed: Whether access is granted.
    :param reason: Denial reason; ``None`` when allowed.
    """

    allowed: bool
    reason: str | None = None


ALLOW = AccessDecision(allowed=True)


def evaluate_roles(
    identity: AuthenticatedIdentity | None, required_roles: Collection[str]
) -> AccessDecision:
    """
    Decide whether ``identity`` satisfies ``required_roles``.

    * No required roles: allowed.
    * No identity: denied, not authenticated.
    * Identity without a role: denied, no role assigned.
    * Role outside the required set: denied, naming both sides.

    :param identity: Verified identity, or ``None``.
    :param required_roles: Roles accepted by the operation.
    :returns: The decision; never raises.
    """
    if not required_roles:
        return ALLOW
    if identity is None:
        return AccessDecision(False, "User not authenticated")
    if not identity.role:
        return AccessDecision(False, "User has no role assigned")
    if identity.role not in required_roles:
        return AccessDecision(
            False,
            f"Access denied. Required roles: {', '.join(required_roles)}. "
            f"User role: {identity.role}",
        )
    return ALLOW


def enforce_roles(
    identity: AuthenticatedIdentity | None, required_roles: Collection[str]
) -> None:
    """
    Raise when :func:`evaluate_roles` denies access.

    :raises AuthorizationError: With the decision reason.
    """
    decision = evaluate_roles(identity, required_roles)
    if not decision.allowed:
        raise AuthorizationError(decision.reason or "Access denied")
