"""User repository: lookups, whitelists and role changes."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from accounts.models.user import User
from accounts.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Password hashing and token handling happen in the auth services; this
    class only stores what it is given.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "email": User.email,
            "name": User.name,
            "role": User.role,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {"email": User.email, "role": User.role}

    def _updatable_fields(self):
        """Profile fields a user may change (role and password excluded)."""
        return {"name", "email", "address", "profile_picture_url"}

    def _default_eagerload(self, stmt):
        # 1:1, so a join is cheaper than a second SELECT
        return stmt.options(joinedload(User.banking_details))

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address; normalized before lookup.
        :type email: str
        :rtype: User | None
        """
        stmt = self._default_eagerload(select(User).where(User.email == email.lower().strip()))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` when ``email`` is taken, optionally ignoring one user.

        :param email: Email address; normalized before lookup.
        :param exclude_id: User id to ignore (the one being updated).
        """
        stmt = select(User.id).where(User.email == email.lower().strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def set_role(self, user: User, role: str) -> User:
        """Assign ``role`` (validated by the model) and flush."""
        user.role = role
        self.flush()
        return user
