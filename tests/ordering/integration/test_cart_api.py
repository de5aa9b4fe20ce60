"""Integration tests for Cart API endpoints via TestClient."""

import jwt
import pytest
from ordering.auth import reset_identity_provider


class TestCartApi:
    def test_requires_token(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authorized, no token"

    def test_unknown_token(self, client):
        response = client.get("/cart", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_empty_cart(self, client, tokens):
        response = client.get("/cart", headers=tokens["customer"])
        assert response.status_code == 200
        assert response.json() == {"customer_id": "cust-001", "items": [], "total_items": 0, "subtotal": 0}

    def test_add_update_remove(self, client, tokens, make_product):
        book = make_product(price=80_000, stock_count=10)
        headers = tokens["customer"]

        response = client.post("/cart/items", json={"productId": str(book.id), "quantity": 2}, headers=headers)
        assert response.status_code == 200
        assert response.json()["subtotal"] == 160_000

        response = client.put(f"/cart/items/{book.id}", json={"quantity": 3}, headers=headers)
        assert response.json()["total_items"] == 3

        response = client.delete(f"/cart/items/{book.id}", headers=headers)
        assert response.json()["items"] == []

    def test_add_beyond_stock(self, client, tokens, make_product):
        book = make_product(stock_count=1)
        response = client.post(
            "/cart/items",
            json={"product_id": str(book.id), "quantity": 2},
            headers=tokens["customer"],
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only 1 left"

    def test_add_unknown_product(self, client, tokens):
        response = client.post("/cart/items", json={"productId": "prod-404"}, headers=tokens["customer"])
        assert response.status_code == 404

    def test_clear(self, client, tokens, make_product):
        book = make_product()
        client.post("/cart/items", json={"productId": str(book.id)}, headers=tokens["customer"])
        response = client.delete("/cart", headers=tokens["customer"])
        assert response.json() == {"status": "cleared"}
        assert client.get("/cart", headers=tokens["customer"]).json()["items"] == []


class TestCartApiWithJWT:
    @pytest.fixture(autouse=True)
    def _jwt_provider(self, monkeypatch):
        monkeypatch.setenv("IDENTITY_PROVIDER", "jwt")
        monkeypatch.setenv("JWT_SECRET", "smartstore-test-secret")
        reset_identity_provider()

    def test_signed_token_is_accepted(self, client):
        token = jwt.encode({"id": "cust-001"}, "smartstore-test-secret", algorithm="HS256")
        response = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["customer_id"] == "cust-001"

    def test_forged_token_is_rejected(self, client):
        token = jwt.encode({"id": "cust-001"}, "wrong-secret", algorithm="HS256")
        response = client.get("/cart", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
