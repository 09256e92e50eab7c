ADMIN_ROLE = "admin"


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def can_manage_account(*, actor_id, actor_role, owner_id) -> bool:
    """Return True if the actor owns the account or holds the admin role."""
    return actor_role == ADMIN_ROLE or is_owner(actor_id=actor_id, owner_id=owner_id)
