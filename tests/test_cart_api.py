"""
Server cart commands and query through the HTTP API.

Each command is one transaction; the query joins the live catalog.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient


def _add(client: TestClient, headers, product_id: int):
    return client.post("/api/cart/add", json={"productId": product_id}, headers=headers)


def _cart(client: TestClient, headers):
    response = client.get("/api/cart", headers=headers)
    assert response.status_code == 200
    return response.json()


class TestAdd:
    def test_add_creates_line_then_increments(self, test_client: TestClient, auth_headers, catalog):
        pid = catalog["Margherita"].id

        first = _add(test_client, auth_headers, pid)
        second = _add(test_client, auth_headers, pid)

        assert first.status_code == 200
        assert first.json() == {"success": True, "newQuantity": 1}
        assert second.json()["newQuantity"] == 2

        lines = _cart(test_client, auth_headers)
        assert len(lines) == 1
        assert lines[0]["product_id"] == pid
        assert lines[0]["title"] == "Margherita"
        assert Decimal(str(lines[0]["price"])) == Decimal("450.00")
        assert lines[0]["quantity"] == 2

    def test_unknown_product(self, test_client: TestClient, auth_headers, catalog):
        response = _add(test_client, auth_headers, 9999)
        assert response.status_code == 404
        assert _cart(test_client, auth_headers) == []

    def test_non_positive_product_id(self, test_client: TestClient, auth_headers):
        response = _add(test_client, auth_headers, 0)
        assert response.status_code == 400

    def test_missing_body(self, test_client: TestClient, auth_headers):
        response = test_client.post("/api/cart/add", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_requires_auth(self, test_client: TestClient, catalog):
        response = _add(test_client, {}, catalog["Margherita"].id)
        assert response.status_code == 401

    def test_lines_keep_insertion_order(self, test_client: TestClient, auth_headers, catalog):
        _add(test_client, auth_headers, catalog["Lemonade"].id)
        _add(test_client, auth_headers, catalog["Margherita"].id)
        _add(test_client, auth_headers, catalog["Lemonade"].id)

        titles = [line["title"] for line in _cart(test_client, auth_headers)]
        assert titles == ["Lemonade", "Margherita"]


class TestDecrement:
    def test_decrement_above_one(self, test_client: TestClient, auth_headers, catalog):
        pid = catalog["Pepperoni"].id
        for _ in range(3):
            _add(test_client, auth_headers, pid)

        response = test_client.patch(f"/api/cart/{pid}/decrement", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "productId": pid, "removed": False, "newQuantity": 2}
        assert _cart(test_client, auth_headers)[0]["quantity"] == 2

    def test_decrement_at_one_removes_line(self, test_client: TestClient, auth_headers, catalog):
        pid = catalog["Pepperoni"].id
        _add(test_client, auth_headers, pid)

        response = test_client.patch(f"/api/cart/{pid}/decrement", headers=auth_headers)

        assert response.json() == {"success": True, "productId": pid, "removed": True, "newQuantity": 0}
        assert _cart(test_client, auth_headers) == []

    @pytest.mark.parametrize("adds, decrements", [(1, 1), (3, 1), (4, 4), (5, 2)])
    def test_adds_minus_decrements(self, test_client: TestClient, auth_headers, catalog, adds, decrements):
        pid = catalog["Margherita"].id
        for _ in range(adds):
            _add(test_client, auth_headers, pid)
        for _ in range(decrements):
            assert test_client.patch(f"/api/cart/{pid}/decrement", headers=auth_headers).status_code == 200

        lines = _cart(test_client, auth_headers)
        if adds - decrements > 0:
            assert lines[0]["quantity"] == adds - decrements
        else:
            assert lines == []

    def test_decrement_absent_line(self, test_client: TestClient, auth_headers, catalog):
        response = test_client.patch(f"/api/cart/{catalog['Pepperoni'].id}/decrement", headers=auth_headers)
        assert response.status_code == 404


class TestRemoveAndClear:
    def test_remove_is_idempotent(self, test_client: TestClient, auth_headers, catalog):
        pid = catalog["Lemonade"].id
        _add(test_client, auth_headers, pid)
        _add(test_client, auth_headers, pid)

        first = test_client.delete(f"/api/cart/{pid}", headers=auth_headers)
        second = test_client.delete(f"/api/cart/{pid}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json() == {"success": True}
        assert second.status_code == 200
        assert _cart(test_client, auth_headers) == []

    def test_clear(self, test_client: TestClient, auth_headers, catalog):
        for product in catalog.values():
            _add(test_client, auth_headers, product.id)

        response = test_client.delete("/api/cart/clear", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert _cart(test_client, auth_headers) == []

    def test_clear_empty_cart(self, test_client: TestClient, auth_headers):
        response = test_client.delete("/api/cart/clear", headers=auth_headers)
        assert response.status_code == 200


class TestCartQuery:
    def test_carts_are_per_user(self, test_client: TestClient, register_user, catalog):
        alice = {"Authorization": f"Bearer {register_user('79990000001')['token']}"}
        bob = {"Authorization": f"Bearer {register_user('79990000002')['token']}"}

        _add(test_client, alice, catalog["Margherita"].id)

        assert len(_cart(test_client, alice)) == 1
        assert _cart(test_client, bob) == []

    def test_reflects_current_catalog_price(self, test_client: TestClient, auth_headers, catalog, db_session):
        product = catalog["Margherita"]
        _add(test_client, auth_headers, product.id)

        product = db_session.merge(product)
        product.price = Decimal("499.00")
        db_session.commit()

        line = _cart(test_client, auth_headers)[0]
        assert Decimal(str(line["price"])) == Decimal("499.00")
