from __future__ import annotations
import pytest
from billtracker import create_app
from billtracker.extensions import db


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SCHEDULER_ENABLED": False,
        "LOG_DIR": str(tmp_path / "logs"),
        "DATA_DIR": str(tmp_path / "data"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "JWT_SECRET_KEY": "test-jwt-secret-with-enough-length-for-hs256",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def register(client, email="alice@example.com", password="s3cret-pass", name="Alice"):
    rv = client.post("/api/auth/register", json={"email": email, "name": name, "password": password})
    assert rv.status_code == 200, rv.get_json()
    return rv.get_json()["token"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def token(client):
    return register(client)


@pytest.fixture()
def headers(token):
    return auth_headers(token)
