import os
import tempfile
import uuid

# Isolated database and storage root, set before the application reads its settings
_TMP_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["STORAGE_ROOT"] = os.path.join(_TMP_DIR, "storage")
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from main import app
from config import settings
from database import Base, SessionLocal, engine
from models.users import User
from utils.seed import seed_defaults

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(autouse=True)
def reset_state(tmp_path, monkeypatch):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_defaults(session)
    finally:
        session.close()
    monkeypatch.setattr(settings, "STORAGE_ROOT", str(tmp_path / "storage"))
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def signup(client):
    def _signup(email, password="secret123", data=None):
        resp = client.post("/auth/signup", json={"email": email, "password": password, "data": data})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {
            "id": body["user"]["id"],
            "uuid": uuid.UUID(body["user"]["id"]),
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
            "body": body,
        }
    return _signup


@pytest.fixture
def seller(signup):
    return signup("seller@example.com", data={"full_name": "Sally Seller", "role": "seller"})


@pytest.fixture
def other_seller(signup):
    return signup("seller2@example.com", data={"full_name": "Sam Seller", "role": "seller"})


@pytest.fixture
def buyer(signup):
    return signup("buyer@example.com", data={"full_name": "Bob Buyer"})


@pytest.fixture
def user_row(db):
    """Load the identity row of a signed-up test user."""
    def _load(account):
        return db.get(User, account["uuid"])
    return _load


@pytest.fixture
def create_product(client):
    def _create(owner, files=None, **fields):
        data = {"name": "Desk Lamp", "price": "19.99", "quantity": "5"}
        data.update({k: str(v) for k, v in fields.items()})
        resp = client.post("/products", data=data, files=files, headers=owner["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create
