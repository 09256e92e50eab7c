"""Repository package exposing persistence-layer access for the accounts models."""

from __future__ import annotations

from accounts.repositories.banking_details import BankingDetailsRepository
from accounts.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
    parse_sort_tokens,
)
from accounts.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "paginate_select",
    "parse_sort_tokens",
    # Domain
    "BankingDetailsRepository",
    "UserRepository",
]
