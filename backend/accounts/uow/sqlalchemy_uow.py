"""
SQLAlchemy implementations of :class:`~accounts.uow.base.UnitOfWork` for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from accounts.core.extensions import db
from accounts.repositories import BankingDetailsRepository, UserRepository
from accounts.uow.base import UnitOfWork

log = logging.getLogger(__name__)

_ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED")
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.banking_details = BankingDetailsRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW over the Flask-scoped session.

    Commits when the block exits cleanly and rolls back otherwise.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session autobegins on first use
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only UoW over the Flask-scoped session.

    * Applies ``SET TRANSACTION ISOLATION LEVEL`` and ``READ ONLY`` on
      PostgreSQL and MySQL/MariaDB when it owns the transaction.
    * Installs guards that block ORM flushes with pending changes and raw
      DML/DDL, on every backend.
    * Always rolls back on exit; :meth:`commit` raises.

    Parameters
    ----------
    isolation_level:
        Isolation hint such as ``"READ COMMITTED"``; ``None`` keeps the
        connection default.
    enforce_db_readonly:
        Issue ``SET TRANSACTION READ ONLY`` where supported.

    Notes
    -----
    When a transaction is already open on the session (an outer test fixture,
    for instance) the UoW attaches to it instead of failing. Only the guards
    apply in that case.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction: attach, guards only
            pass

        self._conn = self.session.connection()
        self._install_listeners()

        if self._txn_ctx is not None and self._conn.dialect.name in _SET_TRANSACTION_DIALECTS:
            self._apply_transaction_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_listeners()
            self._conn = None

    def _apply_transaction_directives(self) -> None:
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in _ISOLATION_LEVELS:
                    log.warning("Unknown isolation_level '%s'; attempting as-is.", iso)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("SET TRANSACTION directives failed (%s); guards only.", exc)

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        :raises RuntimeError: Always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self.session, "before_flush", _before_flush)
        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._ro_before_flush)
        with suppress(InvalidRequestError):
            target = self._conn if self._conn is not None else self.session.get_bind()
            event.remove(target, "before_cursor_execute", self._ro_before_cursor_execute)
        self._listeners_installed = False
