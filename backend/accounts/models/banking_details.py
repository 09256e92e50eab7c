"""Banking details attached one-to-one to a user."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from accounts.core.extensions import db

from .base import ReprMixin, UpdatedAtMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User

AGENCY_PATTERN = re.compile(r"^\d{4,10}$")
ACCOUNT_NUMBER_PATTERN = re.compile(r"^\d{5,20}$")


class BankingDetails(UUIDPKMixin, ReprMixin, UpdatedAtMixin, db.Model):
    """
    Agency and account number of a user (digits only).

    ``user_id`` is unique, so each user has at most one row; deleting the
    user cascades.
    """

    __tablename__ = "banking_details"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    agency: Mapped[str] = mapped_column(String(10), nullable=False)
    account_number: Mapped[str] = mapped_column(String(20), nullable=False)

    user: Mapped[User] = relationship(back_populates="banking_details")

    __table_args__ = (
        Index("ix_banking_details_agency_account", "agency", "account_number"),
    )

    @validates("agency")
    def _validate_agency(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not AGENCY_PATTERN.match(value):
            raise ValueError("Agency must contain 4 to 10 digits.")
        return value

    @validates("account_number")
    def _validate_account_number(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not ACCOUNT_NUMBER_PATTERN.match(value):
            raise ValueError("Account number must contain 5 to 20 digits.")
        return value
