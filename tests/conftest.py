# tests/conftest.py
import os, sys

# put the project root (the directory holding "src") first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# environment must be in place before src.server.settings.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "0"
os.environ["TOKEN_SECRET"] = "test-token-secret"
os.environ["PASSWORD_ITERATIONS"] = "1000"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from src.server.db.session import get_session, init_db
from src.server.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _register(client, email="admin@example.org", name="Cameron", organization="Test Food Hub"):
    r = client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": "password123",
            "name": name,
            "organizationName": organization,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def auth_headers(client):
    token = _register(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(client):
    token = _register(client, email="other@example.org", organization="Other Hub")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def product(client, auth_headers):
    r = client.post(
        "/api/products",
        headers=auth_headers,
        json={
            "name": "Apples, Gala",
            "unitType": "125ct",
            "casesPerPallet": 49,
            "costPerCase": 26.95,
            "farm": "Sambado and Sons",
            "category": "Fruits",
            "bipoc": False,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["product"]


@pytest.fixture
def bipoc_product(client, auth_headers):
    r = client.post(
        "/api/products",
        headers=auth_headers,
        json={
            "name": "Onions, Yellow",
            "unitType": "50 lb",
            "casesPerPallet": 35,
            "costPerCase": 42.0,
            "farm": "Catalan Farm",
            "category": "Vegetables",
            "bipoc": True,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["product"]


@pytest.fixture
def customer(client, auth_headers):
    r = client.post(
        "/api/customers",
        headers=auth_headers,
        json={"name": "SFUSD Nutrition Services", "type": "School District", "regionId": "sf"},
    )
    assert r.status_code == 201, r.text
    return r.json()["customer"]


@pytest.fixture
def register(client):
    """Registers a new organization + admin; returns the {user, token} body."""
    def _do(**kwargs):
        return _register(client, **kwargs)
    return _do
