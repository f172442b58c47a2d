import pytest
from fastapi.testclient import TestClient

from acquisitions.auth import PasswordHasher, TokenIssuer
from acquisitions.config import Settings
from acquisitions.db import Base
from acquisitions.main import create_app
from acquisitions.store import UserStore

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256-signing"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET=TEST_SECRET,
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    engine = application.state.engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield application
    engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def hasher():
    return PasswordHasher()


@pytest.fixture
def issuer(settings):
    return TokenIssuer(settings)


@pytest.fixture
def db_session(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db_session, hasher):
    return UserStore(db_session, hasher)


@pytest.fixture
def seed_user(app):
    """Insert a user straight into the store, bypassing the HTTP layer."""
    def _seed(name="Seed User", email="seed@example.com", password="secret1", role="user"):
        session = app.state.session_factory()
        try:
            user = UserStore(session, app.state.hasher).insert(name=name, email=email, password=password, role=role)
            # return a plain dict to avoid DetachedInstance issues
            return user.model_dump()
        finally:
            session.close()
    return _seed


@pytest.fixture
def login(client):
    def _login(email, password):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp
    return _login


@pytest.fixture
def admin_client(client, seed_user, login):
    seed_user(name="Admin", email="admin@example.com", password="adminpass", role="admin")
    login("admin@example.com", "adminpass")
    return client


@pytest.fixture
def user_client(client, seed_user, login):
    seed_user(name="Regular", email="regular@example.com", password="userpass", role="user")
    login("regular@example.com", "userpass")
    return client
