"""
DTOs for :class:`~accounts.services.users.service.UserProfileService`.

Framework-agnostic contracts between the HTTP layer and the profile service.
Output DTOs round-trip through the profile cache as plain JSON dicts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from accounts.services._shared.dto import PageMeta, PaginationIn

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class BankingDetailsIn:
    """
    Banking details as submitted by the client (already pattern-checked).

    :param agency: 4 to 10 digits.
    :type agency: str
    :param account_number: 5 to 20 digits.
    :type account_number: str
    """

    agency: str
    account_number: str


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Partial profile update. ``None`` fields are left untouched.

    :param user_id: Target user.
    :param name: New display name.
    :param email: New email (must stay unique).
    :param address: New postal address.
    :param profile_picture_url: New avatar URL.
    :param banking_details: Optional nested banking details upsert.
    """

    user_id: str
    name: str | None = None
    email: str | None = None
    address: str | None = None
    profile_picture_url: str | None = None
    banking_details: BankingDetailsIn | None = None

    def profile_changes(self) -> dict[str, Any]:
        """Return the scalar fields that were provided."""
        candidates = {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "profile_picture_url": self.profile_picture_url,
        }
        return {k: v for k, v in candidates.items() if v is not None}


@dataclass(frozen=True, slots=True)
class BankingDetailsUpdateIn:
    """
    Upsert of a user's banking details.

    :param user_id: Target user.
    :param banking_details: New agency and account number.
    """

    user_id: str
    banking_details: BankingDetailsIn


@dataclass(frozen=True, slots=True)
class UserListIn:
    """
    Listing input.

    Allowed filters: ``email``, ``role``. Sort keys: ``email``, ``name``,
    ``role``, ``created_at``.

    :param pagination: Pagination parameters.
    :param filters: Optional equality filters.
    """

    pagination: PaginationIn = field(default_factory=PaginationIn)
    filters: dict[str, Any] | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True, slots=True)
class BankingDetailsOut:
    """
    Stored banking details.

    :param agency: Agency digits.
    :param account_number: Account digits.
    :param updated_at: Last change.
    """

    agency: str
    account_number: str
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """
    Public profile of a user, with banking details when present.

    Never carries the password hash.
    """

    id: str
    email: str
    name: str
    role: str
    address: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    banking_details: BankingDetailsOut | None = None

    def to_cache(self) -> dict[str, Any]:
        """JSON-safe dict used as the cached representation."""
        data = asdict(self)
        data["created_at"] = _iso(self.created_at)
        data["updated_at"] = _iso(self.updated_at)
        if self.banking_details is not None:
            data["banking_details"]["updated_at"] = _iso(self.banking_details.updated_at)
        return data

    @classmethod
    def from_cache(cls, data: dict[str, Any]) -> UserProfileOut:
        """
        Rebuild from :meth:`to_cache` output.

        :raises KeyError: When required keys are missing.
        :raises ValueError: When a timestamp is malformed.
        """
        banking = data.get("banking_details")
        return cls(
            id=data["id"],
            email=data["email"],
            name=data["name"],
            role=data["role"],
            address=data.get("address"),
            profile_picture_url=data.get("profile_picture_url"),
            created_at=_from_iso(data.get("created_at")),
            updated_at=_from_iso(data.get("updated_at")),
            banking_details=(
                BankingDetailsOut(
                    agency=banking["agency"],
                    account_number=banking["account_number"],
                    updated_at=_from_iso(banking.get("updated_at")),
                )
                if banking
                else None
            ),
        )


@dataclass(frozen=True, slots=True)
class UserListOut:
    """
    Paginated list of profiles.

    :param items: Profiles in the current page.
    :param meta: Pagination metadata.
    """

    items: list[UserProfileOut]
    meta: PageMeta
