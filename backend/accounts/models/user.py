"""User model definition for the accounts service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from accounts.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .banking_details import BankingDetails

DEFAULT_ROLE = "user"
ROLES: tuple[str, ...] = ("user", "admin", "manager")


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity with login credentials and profile fields.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    name : str
        Display name.
    address : str | None
        Optional postal address.
    password_hash : str
        scrypt hash ``base64(salt):base64(key)``; never serialized.
    profile_picture_url : str | None
        Optional avatar URL.
    role : str
        One of :data:`ROLES`; defaults to ``"user"``.
    banking_details : BankingDetails | None
        One-to-one banking information.
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    role: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_ROLE, server_default=DEFAULT_ROLE
    )

    banking_details: Mapped[BankingDetails | None] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("role IN ('user', 'admin', 'manager')", name="role_allowed"),
        Index("ix_users_created_at", "created_at"),
        Index("ix_users_role", "role"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()

    @validates("role")
    def _validate_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Unknown role: {value!r}")
        return value
