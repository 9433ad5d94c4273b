"""Pytest configuration and fixtures for the banking API tests."""
import os
import tempfile
from decimal import Decimal

from cryptography.fernet import Fernet

# Set test environment before importing the app
_db_dir = tempfile.mkdtemp(prefix="banking-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["FERNET_KEY"] = Fernet.generate_key().decode()
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from database import Base, engine, SessionLocal
from main import app
from crud.user_crud import create_user
from model.account_model import Account
from model.cards_model import Card
from schemas.user_schemas import UserCreate

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(client):
    """Registers a user through the API and logs in; returns id, token and auth headers."""

    def _make(email="alice@example.com", full_name="Alice Doe", password=DEFAULT_PASSWORD):
        resp = client.post(
            "/users/register",
            json={"email": email, "password": password, "full_name": full_name},
        )
        assert resp.status_code == 200, resp.text
        user = resp.json()
        login = client.post("/users/login", data={"username": email, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return {
            "id": user["id"],
            "email": email,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(client):
    with SessionLocal() as session:
        created = create_user(
            session,
            UserCreate(email="admin@example.com", password=DEFAULT_PASSWORD, full_name="Admin"),
            is_admin=True,
        )
        admin_id = created.id
    login = client.post("/users/login", data={"username": "admin@example.com", "password": DEFAULT_PASSWORD})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    return {"id": admin_id, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def set_account_balance():
    def _set(account_id, amount, field="checking_balance"):
        with SessionLocal() as session:
            session.query(Account).filter(Account.id == account_id).update(
                {getattr(Account, field): Decimal(amount)}, synchronize_session=False
            )
            session.commit()

    return _set


@pytest.fixture
def set_card_balance():
    def _set(card_id, amount):
        with SessionLocal() as session:
            session.query(Card).filter(Card.id == card_id).update(
                {Card.current_balance: Decimal(amount)}, synchronize_session=False
            )
            session.commit()

    return _set


@pytest.fixture
def accounts_of(client):
    """Returns {"checking": {...}, "savings": {...}} for the given user."""

    def _accounts(user):
        resp = client.get("/accounts/", headers=user["headers"])
        assert resp.status_code == 200, resp.text
        return {a["account_type"]: a for a in resp.json()}

    return _accounts


@pytest.fixture
def new_card(client):
    def _card(user, holder="Alice Doe"):
        resp = client.post("/cards/", json={"card_holder_name": holder}, headers=user["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _card
