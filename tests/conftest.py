# tests/conftest.py

import os

import pytest
from cryptography.fernet import Fernet

# create_app exige SECRET_KEY de al menos 32 caracteres
os.environ.setdefault("SECRET_KEY", "clave-de-tests-suficientemente-larga-0123456789")

from fitcoach import ai, create_app, db  # noqa: E402

TOKEN_KEY = Fernet.generate_key().decode()


def build_app(**overrides):
    config = {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
        "SESSION_COOKIE_SECURE": False,
        "AI_DEV_MODE": True,
        "DEV_AUTO_LOGIN": False,
        "OPENAI_API_KEY": None,
        "TOKEN_ENCRYPTION_KEY": TOKEN_KEY,
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture
def app():
    app = build_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    # el cliente de IA es global: no arrastrarlo entre tests
    ai.use_client(None)


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email="ana@fitcoach.io", password="secreto123", **extra):
    payload = {"email": email, "password": password}
    payload.update(extra)
    return client.post("/register", json=payload)


@pytest.fixture
def auth_client(client):
    resp = register(client, firstName="Ana", lastName="García")
    assert resp.status_code == 201
    return client


@pytest.fixture
def user(auth_client):
    from fitcoach.models.user import User
    return User.query.filter_by(email="ana@fitcoach.io").one()
