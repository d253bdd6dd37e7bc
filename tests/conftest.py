import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token, token_claims

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        ADMIN_SECRET=ADMIN_KEY,
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fetch_user(app):
    """Read a user straight from the database, detached from any session."""

    def _fetch(email):
        db = app.state.session_factory()
        try:
            user = db.query(User).filter(User.email == email).first()
            if user is not None:
                db.expunge(user)
            return user
        finally:
            db.close()

    return _fetch


@pytest.fixture
def make_user(app, settings):
    def _make(email, password="secret123", role="Worker", name=None):
        db = app.state.session_factory()
        try:
            user = User(
                email=email.lower(),
                password_hash=get_password_hash(password, settings.BCRYPT_ROUNDS) if password else None,
                role=role,
                name=name,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
            return user
        finally:
            db.close()

    return _make


@pytest.fixture
def token_for(settings):
    def _token(user, **kwargs):
        return create_access_token(token_claims(user), settings, **kwargs)

    return _token


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", password="admin-pass", role="Admin", name="Ada Admin")


@pytest.fixture
def admin_headers(admin, token_for):
    return {"Authorization": f"Bearer {token_for(admin)}"}


@pytest.fixture
def reset_links(app):
    """Collect (email, link) pairs instead of logging them."""
    sent = []
    app.state.send_reset_link = lambda email, link: sent.append((email, link))
    return sent
