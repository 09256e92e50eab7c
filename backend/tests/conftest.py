"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Redis is replaced
by a single :class:`fakeredis.FakeRedis` flushed before every test.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from accounts.core.config import TestingConfig
from accounts.core.extensions import db as _db  # Flask-SQLAlchemy instance
from accounts.core.security import KV_STORE_KEY, SESSION_MANAGER_KEY
from accounts.factory import create_app  # application factory under test
from accounts.services.auth.dto import AuthTokenConfig
from accounts.services.auth.password_hasher import PasswordHasher, ScryptParams

FAKE_REDIS = fakeredis.FakeRedis(decode_responses=True)

TEST_ACCESS_SECRET = "test-access-secret"
TEST_REFRESH_SECRET = "test-refresh-secret"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Injects a fakeredis client instead of connecting to ``REDIS_URL``.
    - Uses distinct, non-placeholder token secrets.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    REDIS_CLIENT = FAKE_REDIS
    JWT_ACCESS_SECRET = TEST_ACCESS_SECRET
    JWT_REFRESH_SECRET = TEST_REFRESH_SECRET
    JWT_ACCESS_TOKEN_EXPIRES_IN = "20m"
    JWT_REFRESH_TOKEN_EXPIRES_IN = "7d"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    Mirrors the SQLAlchemy 2.0 pattern for transactional tests: a top-level
    transaction, a SAVEPOINT per test, and a fresh SAVEPOINT whenever
    SQLAlchemy ends one. ``db.session`` is swapped so application code (units
    of work, repositories) uses this session.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(autouse=True)
def fake_redis():
    """Flush and return the fakeredis client shared with the app."""
    FAKE_REDIS.flushall()
    yield FAKE_REDIS
    FAKE_REDIS.flushall()


@pytest.fixture()
def client(app, session):
    """Flask test client running against the transactional session."""
    return app.test_client()


@pytest.fixture()
def runner(app, session):
    """Flask CLI runner running against the transactional session."""
    return app.test_cli_runner()


@pytest.fixture()
def session_manager(app):
    """The application's :class:`SessionManager` (fakeredis-backed)."""
    return app.extensions[SESSION_MANAGER_KEY]


@pytest.fixture()
def kv_store(app):
    """The application's key-value store adapter (fakeredis-backed)."""
    return app.extensions[KV_STORE_KEY]


@pytest.fixture(scope="session")
def auth_cfg() -> AuthTokenConfig:
    """Token configuration matching :class:`TestConfig`."""
    return AuthTokenConfig(
        access_secret=TEST_ACCESS_SECRET,
        refresh_secret=TEST_REFRESH_SECRET,
    )


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    """Low-cost scrypt hasher so tests stay fast."""
    return PasswordHasher(ScryptParams(n=1024))


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the transactional session fixture.

    Only tests that use the database (directly or through ``client``) get a
    session; pure unit tests stay database-free.
    """
    from tests.factories import SQLAlchemySession

    if "session" not in request.fixturenames:
        SQLAlchemySession.set(None)
        yield
        return
    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
