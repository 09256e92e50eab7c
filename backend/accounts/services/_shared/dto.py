# accounts/services/_shared/dto.py
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract.

    :param page: 1-based page number.
    :type page: int
    :param limit: Page size (> 0).
    :type limit: int
    :param sort: Sort tokens like ``["-created_at", "email"]``.
    :type sort: Iterable[str] | None
    """

    page: int = 1
    limit: int = 20
    sort: Iterable[str] | None = None


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :param limit: Page size.
    :param total: Total rows available.
    :param has_prev: Whether a previous page exists.
    :param has_next: Whether a next page exists.
    """

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool
