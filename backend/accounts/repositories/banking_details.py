"""Banking details repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from accounts.models.banking_details import BankingDetails
from accounts.models.user import User
from accounts.repositories.base import BaseRepository


class BankingDetailsRepository(BaseRepository[BankingDetails]):
    """Persistence-only repository for :class:`BankingDetails`."""

    model = BankingDetails

    def _filterable_fields(self):
        return {"user_id": BankingDetails.user_id}

    def _updatable_fields(self):
        return {"agency", "account_number"}

    def get_by_user_id(self, user_id: str) -> BankingDetails | None:
        stmt = select(BankingDetails).where(BankingDetails.user_id == user_id)
        return cast(BankingDetails | None, self.session.execute(stmt).scalars().first())

    def upsert_for_user(self, user: User, *, agency: str, account_number: str) -> BankingDetails:
        """Create or replace the banking details of ``user``.

        Goes through the relationship so ``user.banking_details`` reflects the
        change inside the same session.

        :param user: Owner of the details.
        :param agency: Agency digits.
        :param account_number: Account digits.
        :returns: The persisted row, flushed.
        :rtype: BankingDetails
        """
        existing = user.banking_details
        if existing is None:
            user.banking_details = BankingDetails(agency=agency, account_number=account_number)
            self.flush()
            return user.banking_details
        return self.update(existing, agency=agency, account_number=account_number)
