"""Generic repository base and query helpers for SQLAlchemy 2.x.

Persistence-only concerns shared by every repository live here:

- pagination and sorting value objects;
- whitelisted sorting with a primary-key tiebreaker;
- whitelisted equality filters and update fields.

Repositories never commit or roll back. Services own the transaction through
a Unit of Work.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from accounts.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ------------------------------- Pagination ----------------------------------


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number.
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param sort: Public sort tokens (e.g. ``["-created_at", "name"]``).
    :type sort: list[str]
    """

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    """A page of results plus the metadata needed to render it."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Turn ``["-created_at", "name"]`` into ``[("created_at", True), ("name", False)]``.

    Blank tokens are dropped.
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = (token[1:] if is_desc else token).strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Add ``ORDER BY`` clauses for whitelisted tokens.

    Unknown tokens are ignored. The primary key is always appended in
    ascending order so pages are stable.

    :param stmt: Base select.
    :param sortable_fields: Public field to ORM attribute mapping.
    :param tokens: Public sort tokens.
    :param pk_attr: Primary-key attribute used as tiebreaker.
    :returns: The ordered select.
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())

    if orders:
        stmt = stmt.order_by(*orders)
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())
    return stmt


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
    with_total: bool = True,
) -> tuple[list[Any], int]:
    """Execute ``stmt`` for one page and optionally count all matching rows.

    ``ORDER BY`` is stripped from the count query.

    :returns: ``(items, total)``; ``total`` is 0 when ``with_total`` is false.
    :rtype: tuple[list[Any], int]
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    total = 0
    if with_total:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int(session.execute(count_stmt).scalar_one())

    sliced = stmt.limit(limit).offset((page - 1) * limit)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single aggregate.

    Subclasses set ``model`` and may override the whitelist hooks
    ``_sortable_fields``, ``_filterable_fields`` and ``_updatable_fields``,
    plus ``_default_eagerload`` for relationship loading.
    """

    #: SQLAlchemy mapped model (set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope. Falls
            back to the Flask-scoped ``db.session`` when omitted.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self, stmt: Select[Any], filters: Mapping[str, Any] | None
    ) -> Select[Any]:
        """Apply equality filters for whitelisted keys; other keys are ignored."""
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses = [
            allowed[k] == v
            for k, v in filters.items()
            if isinstance(allowed.get(k), InstrumentedAttribute)
        ]
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _sanitize_update_fields(
        self, fields: Mapping[str, Any], *, strict: bool = True
    ) -> dict[str, Any]:
        """Keep only whitelisted update keys.

        :raises ValueError: When ``strict`` and unknown keys are present, or
            when the repository whitelists nothing.
        """
        allowed = self._updatable_fields()
        if not allowed:
            if fields and strict:
                raise ValueError("No updatable fields configured for this repository.")
            return {}

        unknown = sorted(k for k in fields if k not in allowed)
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return {k: v for k, v in fields.items() if k in allowed}

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so defaults and the PK materialize."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Return the entity with primary key ``entity_id`` or ``None``."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        stmt: Select[Any] = select(func.count()).select_from(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        return bool(self.session.execute(stmt).scalar_one())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    # ----------------------------- Safe updates -------------------------------

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign whitelisted keys through ``setattr`` so ``@validates`` hooks run.

        :param instance: Entity to mutate.
        :param fields: Public mapping of fields to assign.
        :param strict: Raise on unknown keys.
        :param flush: Flush after assignment.
        :returns: The mutated instance.
        :raises ValueError: See :meth:`_sanitize_update_fields`.
        """
        for k, v in self._sanitize_update_fields(fields, strict=strict).items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        return self.assign_updates(instance, fields, strict=True, flush=True)

    # ------------------------------- Listing ---------------------------------

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
        with_total: bool = True,
    ) -> Page[E]:
        """Return one page of entities with stable, whitelisted sorting.

        :param pagination: Page, limit and sort tokens.
        :param filters: Equality filters (public keys).
        :param with_total: Whether to count all matching rows.
        :rtype: Page[E]
        """
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = self._default_eagerload(stmt)
        stmt = apply_sorting(
            stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr()
        )
        items, total = paginate_select(
            self.session,
            stmt,
            page=pagination.page,
            limit=pagination.limit,
            with_total=with_total,
        )
        return Page(
            items=cast(list[E], items),
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )
