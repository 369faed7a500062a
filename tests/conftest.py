import os

# Test-safe environment defaults, read by config.Config at import time
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config import Config
from extensions import db
from models.user import User


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        RATE_LIMIT_ENABLED = False
        EMAIL_TRANSPORT = "resend"
        RESEND_API_KEY = "re_test"
        LLM_API_KEY = "llm_test"
        PASSWORD_RESET_CODE_TTL_MINUTES = 10
        PASSWORD_RESET_CODE_FULL_RANGE = False

    app = create_app(TestConfig)
    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def account(app):
    with app.app_context():
        user = User(
            username="cravinguser",
            email="user@example.com",
            password_hash=generate_password_hash("OldPass1!", method="scrypt"),
        )
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def outbox(monkeypatch):
    """Captures reset emails instead of calling the mail transport."""
    sent = []

    def fake_send(email, code):
        sent.append({"email": email, "code": code})
        return True

    monkeypatch.setattr("routes.password_reset.send_password_reset_code", fake_send)
    return sent
