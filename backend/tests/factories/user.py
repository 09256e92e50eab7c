"""Factory Boy definition for :class:`accounts.models.user.User`."""

from __future__ import annotations

import factory

from accounts.models.user import User
from accounts.services.auth.password_hasher import PasswordHasher, ScryptParams
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"

_hasher = PasswordHasher(ScryptParams(n=1024))


class UserFactory(BaseFactory):
    """Build persisted :class:`accounts.models.user.User` instances.

    Pass ``password="..."`` to choose the plaintext; it is hashed with a
    low-cost scrypt configuration.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Sequence(lambda n: f"User {n}")
    address = None
    role = "user"
    password_hash = factory.LazyAttribute(lambda o: _hasher.hash(o.password))


class AdminFactory(UserFactory):
    role = "admin"


class ManagerFactory(UserFactory):
    role = "manager"
