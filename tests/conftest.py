from __future__ import annotations

import pytest

from expenseflow import create_app
from expenseflow.extensions import db


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'expenseflow-test.db'}",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user and return bearer headers for them."""
    def _register(email="alice@example.com", name="Alice", password="secret123"):
        resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}
    return _register


@pytest.fixture
def auth_headers(register):
    return register()


@pytest.fixture
def add_txn(client):
    """POST a transaction and return its JSON body."""
    def _add(headers, **fields):
        payload = {"type": "expense", "amount": 100, "date": "2024-03-05", "description": "Lunch"}
        payload.update(fields)
        resp = client.post("/api/transactions", json=payload, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _add
