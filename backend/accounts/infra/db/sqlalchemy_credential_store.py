# accounts/infra/db/sqlalchemy_credential_store.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from accounts.models.user import User
from accounts.services._shared.errors import ConflictError, violates
from accounts.services._shared.ports import CredentialRecord, CredentialStore, NewCredential
from accounts.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def to_record(user: User) -> CredentialRecord:
    """Copy the columns the credential service needs out of a live ``User``."""
    return CredentialRecord(
        id=user.id,
        email=user.email,
        name=user.name,
        password_hash=user.password_hash,
        role=user.role,
        address=user.address,
        profile_picture_url=user.profile_picture_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class SQLAlchemyCredentialStore(CredentialStore):
    """
    :class:`CredentialStore` backed by the ``users`` table.

    Records are built while the unit of work is open so no detached instance
    leaks to callers.
    """

    def find_credential_by_email(self, email: str) -> CredentialRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get_by_email(email)
            return to_record(user) if user is not None else None

    def find_credential_by_id(self, user_id: str) -> CredentialRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get(user_id)
            return to_record(user) if user is not None else None

    def create_credential(self, new: NewCredential) -> CredentialRecord:
        """
        Insert a user row.

        :raises ConflictError: When the email is taken, including a concurrent
            registration that wins the race to the unique index.
        """
        try:
            with SQLAlchemyUnitOfWork() as uow:
                user = uow.users.add(
                    User(
                        email=new.email,
                        name=new.name,
                        password_hash=new.password_hash,
                        role=new.role,
                        address=new.address,
                    )
                )
                # Server-side timestamps must be loaded before the commit expires them
                uow.session.refresh(user)
                record = to_record(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise ConflictError("User", "Email already registered") from exc
            raise
        return record
