"""
Test configuration.

The settings object is cached on first import, so the environment is
pinned here before anything from bizsuite is imported. Every test gets a
fresh in-memory SQLite schema with the reference plans and modules seeded.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = ""
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient

import bizsuite.models  # noqa: F401
from bizsuite.core.security import get_password_hash
from bizsuite.database import Base, SessionLocal, engine
from bizsuite.main import app
from bizsuite.models.admin import PlatformAdmin
from bizsuite.seed import seed_reference_data

API = "/api/v1"
PASSWORD = "securepassword123"
ADMIN_EMAIL = "ops@bizsuite.example.com"
ADMIN_PASSWORD = "admin-password-1"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_reference_data(session)
    finally:
        session.close()
    yield
    Base.metadata.drop_all(bind=engine)


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


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register_tenant(client, slug, business_type="inventory", email=None):
    response = client.post(f"{API}/auth/register", json={
        "tenantName": f"{slug.title()} Corp",
        "slug": slug,
        "businessType": business_type,
        "email": email or f"owner@{slug}.example.com",
        "password": PASSWORD,
        "firstName": "Jane",
        "lastName": "Doe",
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def acme(client):
    """A freshly registered tenant: its auth payload plus ready-made headers."""
    data = register_tenant(client, "acme")
    data["headers"] = auth_headers(data["token"])
    return data


@pytest.fixture
def globex(client):
    data = register_tenant(client, "globex", business_type="hotel")
    data["headers"] = auth_headers(data["token"])
    return data


@pytest.fixture
def staff_headers(client, acme):
    response = client.post(f"{API}/users", headers=acme["headers"], json={
        "email": "staff@acme.example.com",
        "password": PASSWORD,
        "role": "staff",
    })
    assert response.status_code == 201, response.text
    login = client.post(f"{API}/auth/login", json={"email": "staff@acme.example.com", "password": PASSWORD})
    return auth_headers(login.json()["data"]["token"])


@pytest.fixture
def platform_admin(db):
    admin = PlatformAdmin(
        email=ADMIN_EMAIL,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        first_name="Ops",
        last_name="Admin",
    )
    db.add(admin)
    db.commit()
    return admin


@pytest.fixture
def admin_headers(client, platform_admin):
    response = client.post(f"{API}/admin/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return auth_headers(response.json()["data"]["token"])
