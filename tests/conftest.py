"""
Pytest fixtures shared by the storefront tests.

The MongoDB database is replaced by an in-memory mongomock database for
every test, and bearer tokens are minted with the same secret the app
verifies them with.
"""
import time

import jwt
import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import settings

TEST_SECRET = "storefront-test-secret-with-enough-bytes"


def make_token(uid="user-1", email="user@example.com", expires_in=300):
    now = int(time.time())
    return jwt.encode(
        {"sub": uid, "email": email, "iat": now, "exp": now + expires_in},
        TEST_SECRET,
        algorithm="HS256",
    )


@pytest.fixture()
def db(monkeypatch):
    """Fresh in-memory database, installed as the app's database."""
    mock_db = mongomock.MongoClient()["storefront_test"]
    database.ensure_indexes(mock_db)
    monkeypatch.setattr(database, "db", mock_db)
    monkeypatch.setattr(settings, "AUTH_SECRET", TEST_SECRET)
    monkeypatch.setattr(settings, "AUTH_AUDIENCE", None)
    return mock_db


@pytest.fixture()
def client(db):
    from main import app
    return TestClient(app)


@pytest.fixture()
def user():
    return {"uid": "user-1", "email": "user@example.com", "role": "User"}


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture()
def admin_headers(db):
    db["user"].insert_one({"_id": "admin-1", "email": "admin@example.com", "name": "Admin",
                           "avatar": "", "role": "Admin"})
    return {"Authorization": f"Bearer {make_token('admin-1', 'admin@example.com')}"}


@pytest.fixture()
def make_product(db):
    """Insert a product and return its id as a string."""
    def _make(**overrides):
        data = {
            "title": "Oversized Tee",
            "price": 500.0,
            "quantity": 10,
            "category": "tshirt",
            "gender": "men",
            "main_image": "tee.webp",
            "images": [],
        }
        data.update(overrides)
        return database.create_document("product", data, target=db)
    return _make


@pytest.fixture()
def make_coupon(db):
    def _make(code="SAVE10", discount_type="percent", discount=10, min_amount=0, is_active=True):
        return database.create_document("coupon", {
            "code": code,
            "discount_type": discount_type,
            "discount": discount,
            "min_amount": min_amount,
            "is_active": is_active,
        }, target=db)
    return _make
