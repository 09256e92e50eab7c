from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from accounts.services._shared.errors import ConflictError


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """
    Persisted identity as seen by the credential service.

    :param id: Stable user identifier (UUID string).
    :param email: Normalized (lowercase, trimmed) login email.
    :param name: Display name.
    :param password_hash: ``base64(salt):base64(key)`` scrypt hash.
    :param role: Assigned role; always present.
    :param address: Optional postal address.
    :param profile_picture_url: Optional avatar URL.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: str
    email: str
    name: str
    password_hash: str
    role: str
    address: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class NewCredential:
    """
    Fields required to persist a new identity.

    :param email: Normalized email.
    :param name: Display name.
    :param password_hash: Already-hashed password.
    :param role: Role to assign.
    :param address: Optional postal address.
    """

    email: str
    name: str
    password_hash: str
    role: str
    address: str | None = None


class CredentialStore(Protocol):
    """
    Persistence collaborator of the credential service.

    ``create_credential`` raises
    :class:`~accounts.services._shared.errors.ConflictError` when the email
    is already taken.
    """

    def find_credential_by_email(self, email: str) -> CredentialRecord | None: ...
    def find_credential_by_id(self, user_id: str) -> CredentialRecord | None: ...
    def create_credential(self, new: NewCredential) -> CredentialRecord: ...


class InMemoryCredentialStore(CredentialStore):
    """Simple dictionary-backed credential store for unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[str, CredentialRecord] = {}

    def find_credential_by_email(self, email: str) -> CredentialRecord | None:
        norm = email.lower().strip()
        return next((r for r in self._by_id.values() if r.email == norm), None)

    def find_credential_by_id(self, user_id: str) -> CredentialRecord | None:
        return self._by_id.get(user_id)

    def create_credential(self, new: NewCredential) -> CredentialRecord:
        if self.find_credential_by_email(new.email) is not None:
            raise ConflictError("User", "Email already registered")
        now = datetime.now(UTC)
        record = CredentialRecord(
            id=str(uuid4()),
            email=new.email.lower().strip(),
            name=new.name,
            password_hash=new.password_hash,
            role=new.role,
            address=new.address,
            created_at=now,
            updated_at=now,
        )
        self._by_id[record.id] = record
        return record

    def remove(self, user_id: str) -> None:
        """Drop a record, simulating an account deleted after token issuance."""
        self._by_id.pop(user_id, None)

    def set_role(self, user_id: str, role: str) -> None:
        """Change the stored role of a record."""
        self._by_id[user_id] = replace(self._by_id[user_id], role=role)
