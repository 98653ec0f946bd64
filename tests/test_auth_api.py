"""
Registration, login and bearer-token checks through the HTTP API.
"""
from fastapi.testclient import TestClient

from storefront.utils.security import create_access_token, decode_access_token


class TestRegister:
    def test_register_returns_token_and_normalized_phone(self, test_client: TestClient):
        response = test_client.post(
            "/api/auth/register",
            json={"phone": "+7 (999) 123-45-67", "password": "secret123", "confirmPassword": "secret123"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["phone"] == "79991234567"
        assert decode_access_token(data["token"]) == data["user"]["id"]

    def test_password_mismatch(self, test_client: TestClient):
        response = test_client.post(
            "/api/auth/register",
            json={"phone": "79991234567", "password": "secret123", "confirmPassword": "secret124"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"

    def test_short_password(self, test_client: TestClient):
        response = test_client.post(
            "/api/auth/register",
            json={"phone": "79991234567", "password": "abc", "confirmPassword": "abc"},
        )
        assert response.status_code == 400

    def test_bad_phone(self, test_client: TestClient):
        response = test_client.post(
            "/api/auth/register",
            json={"phone": "12345", "password": "secret123", "confirmPassword": "secret123"},
        )
        assert response.status_code == 400

    def test_duplicate_phone_in_other_format(self, test_client: TestClient, register_user):
        register_user("79991234567")

        response = test_client.post(
            "/api/auth/register",
            json={"phone": "+7 999 123 45 67", "password": "secret123", "confirmPassword": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"

    def test_missing_field_is_bad_request(self, test_client: TestClient):
        response = test_client.post("/api/auth/register", json={"phone": "79991234567", "password": "secret123"})
        assert response.status_code == 400


class TestLogin:
    def test_login_ok(self, test_client: TestClient, register_user):
        user = register_user()

        response = test_client.post("/api/auth/login", json={"phone": "+79991234567", "password": "secret123"})

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == user["user"]["id"]
        assert decode_access_token(data["token"]) == user["user"]["id"]

    def test_wrong_password(self, test_client: TestClient, register_user):
        register_user()
        response = test_client.post("/api/auth/login", json={"phone": "79991234567", "password": "wrongpass"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_bad_phone_format(self, test_client: TestClient):
        response = test_client.post("/api/auth/login", json={"phone": "123", "password": "secret123"})
        assert response.status_code == 400

    def test_unknown_user(self, test_client: TestClient):
        response = test_client.post("/api/auth/login", json={"phone": "79990000000", "password": "secret123"})
        assert response.status_code == 401


class TestBearerToken:
    def test_missing_token(self, test_client: TestClient):
        response = test_client.get("/api/cart")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, test_client: TestClient):
        response = test_client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, test_client: TestClient, register_user):
        user_id = register_user()["user"]["id"]
        token = create_access_token(user_id, ttl_minutes=-1)

        response = test_client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_of_missing_user(self, test_client: TestClient):
        token = create_access_token(999, ttl_minutes=60)
        response = test_client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_valid_token(self, test_client: TestClient, auth_headers):
        response = test_client.get("/api/cart", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []


class TestHealth:
    def test_health_outside_api_prefix(self, test_client: TestClient):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
