"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from accounts.models import BankingDetails, User


class TestUser:
    def test_defaults_and_timestamps(self, session):
        u = User(email="Test@Example.com", name="  Tester ", password_hash="h")
        session.add(u)
        session.commit()

        assert len(u.id) == 36
        assert u.email == "test@example.com"
        assert u.name == "Tester"
        assert u.role == "user"
        assert u.created_at is not None
        assert u.updated_at is not None

    def test_email_unique(self, session):
        session.add(User(email="alice@example.com", name="A", password_hash="h"))
        session.commit()

        session.add(User(email="ALICE@example.com", name="B", password_hash="h"))
        with pytest.raises(IntegrityError):
            session.commit()

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
    def test_email_validation(self, email):
        with pytest.raises(ValueError):
            User(email=email, name="A", password_hash="h")

    def test_name_required(self):
        with pytest.raises(ValueError):
            User(email="a@example.com", name="   ", password_hash="h")

    def test_role_must_be_known(self):
        with pytest.raises(ValueError, match="Unknown role"):
            User(email="a@example.com", name="A", password_hash="h", role="root")

    def test_repr_hides_nothing_sensitive(self):
        u = User(email="a@example.com", name="A", password_hash="secret-hash")
        assert "secret-hash" not in repr(u)

    def test_banking_details_cascade_on_delete(self, session):
        u = User(email="c@example.com", name="C", password_hash="h")
        u.banking_details = BankingDetails(agency="1234", account_number="123456")
        session.add(u)
        session.commit()
        details_id = u.banking_details.id

        session.delete(u)
        session.commit()

        assert session.get(BankingDetails, details_id) is None
