"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from accounts.models import User
from accounts.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        after = db.session.query(User).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        after = db.session.query(User).count()
        assert after == initial

    def test_writer_uow_exposes_both_repositories(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN it is entered
        THEN user and banking-details repositories share its session.
        """
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.session
            assert uow.banking_details.session is uow.session
