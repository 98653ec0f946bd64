"""
Shared fixtures.

Settings are module constants read at import time, so the environment is
prepared before anything from storefront is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["SEED_CATALOG"] = "0"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel
from storefront.main import app

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_database():
    """Every test starts from an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db_session):
    """Three products, returned by title."""
    products = [
        ProductModel(title="Margherita", description="Tomato, mozzarella", price=Decimal("450.00"), image_url="/img/m.jpg"),
        ProductModel(title="Pepperoni", description="Spicy", price=Decimal("520.00"), image_url="/img/p.jpg"),
        ProductModel(title="Lemonade", description="0.5 l", price=Decimal("150.00"), image_url="/img/l.jpg"),
    ]
    db_session.add_all(products)
    db_session.commit()
    return {p.title: p for p in products}


@pytest.fixture
def test_client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """Factory: registers a user and returns the auth response body."""

    def _register(phone: str = "+7 999 123 45 67", password: str = DEFAULT_PASSWORD):
        response = test_client.post(
            "/api/auth/register",
            json={"phone": phone, "password": password, "confirmPassword": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_user):
    data = register_user()
    return {"Authorization": f"Bearer {data['token']}"}
