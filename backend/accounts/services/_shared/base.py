# accounts/services/_shared/base.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from accounts.core import errors as api_errors
from accounts.repositories.base import Pagination
from accounts.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreUnavailableError,
)
from accounts.services._shared.policies.common import can_manage_account
from accounts.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids).

    :param actor_id: Authenticated user identifier (token ``sub``).
    :param actor_role: Role claim of the authenticated user.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: str | None = None
    actor_role: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared validation helpers (pagination/sorting, ownership).

    Notes
    -----
    - Services never touch the global session; they always use a Unit of Work.
    - Collaborators (stores, publishers, codecs) are injected, never imported
      as globals.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :param limit: Page size.
        :param sort: Sort tokens like ["-created_at", "name"].
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = max(1, int(limit))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    def ensure_can_manage(self, owner_id: str, *, msg: str | None = None) -> None:
        """
        Ensure the context actor may act on the account ``owner_id``.

        :param owner_id: Account the operation targets.
        :type owner_id: str
        :param msg: Optional custom error message.
        :type msg: str | None
        :raises AuthorizationError: If the actor is neither the owner nor an admin.
        """
        if not can_manage_account(
            actor_id=self.ctx.actor_id, actor_role=self.ctx.actor_role, owner_id=owner_id
        ):
            raise AuthorizationError(msg or "You can only access your own account.")

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be rendered or re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, AuthorizationError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, StoreUnavailableError):
            return api_errors.ServiceUnavailable()

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        return exc
