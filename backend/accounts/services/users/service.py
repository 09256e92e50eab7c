"""
UserProfileService
==================

Application service for user profiles and their banking details:

- Cache-aside profile reads (``user:{id}`` in the key-value store).
- Partial profile updates with an optional nested banking-details upsert.
- Banking-details upsert followed by a ``banking-details.updated`` event.
- Paginated listing.

Notes
-----
- The cache holds public fields only and is best effort: store failures are
  logged and the database stays authoritative.
- Events are published after the transaction commits.
- Reads use ``ro_uow()``; writes use ``rw_uow()``.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy.exc import IntegrityError

from accounts.models.user import User
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.dto import PageMeta
from accounts.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreUnavailableError,
    violates,
)
from accounts.services._shared.ports import EventPublisher, KeyValueStore
from accounts.services.users.dto import (
    BankingDetailsIn,
    BankingDetailsOut,
    BankingDetailsUpdateIn,
    UserListIn,
    UserListOut,
    UserProfileOut,
    UserUpdateIn,
)

log = logging.getLogger(__name__)

USER_CACHE_PREFIX = "user:"
BANKING_DETAILS_UPDATED = "banking-details.updated"
EMAIL_TAKEN_MESSAGE = "Email already in use"


def user_cache_key(user_id: str) -> str:
    return f"{USER_CACHE_PREFIX}{user_id}"


class UserProfileService(BaseService):
    """
    Profile reads and writes for a single request.

    Ownership is enforced here (owner or admin) through
    :meth:`BaseService.ensure_can_manage`; role requirements for listing are
    enforced at the route.
    """

    def __init__(
        self,
        *,
        cache: KeyValueStore,
        events: EventPublisher,
        cache_ttl: int = 3600,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param cache: Key-value store holding cached profiles.
        :param events: Outbound event publisher.
        :param cache_ttl: Seconds a cached profile stays valid.
        :param ctx: Request-scoped actor information.
        """
        super().__init__(ctx=ctx)
        self.cache = cache
        self.events = events
        self.cache_ttl = cache_ttl

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: str) -> UserProfileOut:
        """
        Return the profile of ``user_id``, from cache when possible.

        :param user_id: Target user.
        :type user_id: str
        :rtype: :class:`UserProfileOut`
        :raises AuthorizationError: If the actor is neither owner nor admin.
        :raises NotFoundError: If the user does not exist.
        """
        self.ensure_can_manage(user_id)

        cached = self._cache_get(user_id)
        if cached is not None:
            return cached

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            out = self._to_profile_out(user)

        self._cache_put(out)
        return out

    def list_users(self, dto: UserListIn) -> UserListOut:
        """
        List profiles with pagination, whitelisted filters and sorting.

        :param dto: Listing input.
        :type dto: :class:`UserListIn`
        :rtype: :class:`UserListOut`
        """
        with self.ro_uow() as uow:
            pagination = self.ensure_pagination(
                page=dto.pagination.page,
                limit=dto.pagination.limit,
                sort=dto.pagination.sort,
            )
            page = uow.users.paginate(pagination, filters=dto.filters or None)
            items = [self._to_profile_out(u) for u in page.items]

        meta = PageMeta(
            page=page.page,
            limit=page.limit,
            total=page.total,
            has_prev=page.page > 1,
            has_next=(page.page * page.limit) < page.total,
        )
        return UserListOut(items=items, meta=meta)

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def update_user(self, dto: UserUpdateIn) -> UserProfileOut:
        """
        Apply a partial profile update, optionally upserting banking details.

        :param dto: Fields to change.
        :type dto: :class:`UserUpdateIn`
        :rtype: :class:`UserProfileOut`
        :raises NotFoundError: If the user does not exist.
        :raises ConflictError: If the new email belongs to another account.
        :raises ServiceError: If a field fails model validation.
        """
        self.ensure_can_manage(dto.user_id)
        try:
            with self.rw_uow() as uow:
                user = self._load(uow, dto.user_id)
                changes = dto.profile_changes()
                if "email" in changes and uow.users.exists_by_email(
                    changes["email"], exclude_id=user.id
                ):
                    raise ConflictError("User", EMAIL_TAKEN_MESSAGE)

                uow.users.assign_updates(user, changes)
                if dto.banking_details is not None:
                    uow.banking_details.upsert_for_user(
                        user,
                        agency=dto.banking_details.agency,
                        account_number=dto.banking_details.account_number,
                    )
                uow.session.refresh(user)
                out = self._to_profile_out(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise ConflictError("User", EMAIL_TAKEN_MESSAGE) from exc
            raise
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc

        self._cache_invalidate(dto.user_id)
        if dto.banking_details is not None:
            self._publish_banking_update(dto.user_id, dto.banking_details)
        log.info("user profile updated", extra={"user_id": dto.user_id})
        return out

    def update_banking_details(self, dto: BankingDetailsUpdateIn) -> BankingDetailsOut:
        """
        Create or replace the banking details of a user and announce it.

        :param dto: Target user and new details.
        :type dto: :class:`BankingDetailsUpdateIn`
        :rtype: :class:`BankingDetailsOut`
        :raises NotFoundError: If the user does not exist.
        :raises ServiceError: If a field fails model validation.
        """
        self.ensure_can_manage(dto.user_id)
        details = dto.banking_details
        try:
            with self.rw_uow() as uow:
                user = self._load(uow, dto.user_id)
                row = uow.banking_details.upsert_for_user(
                    user, agency=details.agency, account_number=details.account_number
                )
                uow.session.refresh(row)
                out = BankingDetailsOut(
                    agency=row.agency,
                    account_number=row.account_number,
                    updated_at=row.updated_at,
                )
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc

        self._cache_invalidate(dto.user_id)
        self._publish_banking_update(dto.user_id, details)
        return out

    def invalidate(self, user_id: str) -> None:
        """Drop the cached profile of ``user_id`` (best effort)."""
        self._cache_invalidate(user_id)

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _load(uow, user_id: str) -> User:
        user = uow.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    def _to_profile_out(user: User) -> UserProfileOut:
        banking = user.banking_details
        return UserProfileOut(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            address=user.address,
            profile_picture_url=user.profile_picture_url,
            created_at=user.created_at,
            updated_at=user.updated_at,
            banking_details=(
                BankingDetailsOut(
                    agency=banking.agency,
                    account_number=banking.account_number,
                    updated_at=banking.updated_at,
                )
                if banking is not None
                else None
            ),
        )

    def _publish_banking_update(self, user_id: str, details: BankingDetailsIn) -> None:
        self.events.publish(
            BANKING_DETAILS_UPDATED,
            {
                "userId": user_id,
                "bankingDetails": {
                    "agency": details.agency,
                    "account": details.account_number,
                },
            },
        )

    # -------------------------- Cache access -------------------------------

    def _cache_get(self, user_id: str) -> UserProfileOut | None:
        key = user_cache_key(user_id)
        try:
            raw = self.cache.get(key)
        except StoreUnavailableError:
            log.warning("profile cache read skipped", extra={"cache_key": key})
            return None
        if raw is None:
            return None
        try:
            return UserProfileOut.from_cache(json.loads(raw))
        except (KeyError, TypeError, ValueError):
            log.warning("discarding unreadable cache entry", extra={"cache_key": key})
            return None

    def _cache_put(self, out: UserProfileOut) -> None:
        key = user_cache_key(out.id)
        try:
            self.cache.set(key, json.dumps(out.to_cache()), ttl=self.cache_ttl)
        except StoreUnavailableError:
            log.warning("profile cache write skipped", extra={"cache_key": key})

    def _cache_invalidate(self, user_id: str) -> None:
        key = user_cache_key(user_id)
        try:
            self.cache.delete(key)
        except StoreUnavailableError:
            log.warning("profile cache invalidation failed", extra={"cache_key": key})
