# Overview: Pytest coverage for product catalog endpoints.

from decimal import Decimal

import pytest
from conftest import auth_headers


def _create(client, token, **payload):
    body = {"name": "Widget", "sku": "W-1", "price": "100.00", "stock": 10}
    body.update(payload)
    return client.post("/api/products", json=body, headers=auth_headers(token))


class TestProductCrud:
    def test_requires_auth(self, client, db_session):
        assert client.get("/api/products").status_code == 401

    def test_create_and_get(self, client, token_a):
        response = _create(client, token_a, category="Tools")
        assert response.status_code == 201
        product = response.get_json()
        assert product["price"] == "100.00"
        assert product["low_stock_threshold"] == 10
        assert product["is_low_stock"] is True

        fetched = client.get(f"/api/products/{product['id']}", headers=auth_headers(token_a))
        assert fetched.status_code == 200
        assert fetched.get_json()["name"] == "Widget"

    def test_missing_required_fields(self, client, token_a):
        response = client.post("/api/products", json={"name": "No SKU"}, headers=auth_headers(token_a))
        assert response.status_code == 400
        assert "Missing required fields" in response.get_json()["error"]

    @pytest.mark.parametrize("price", [-1, "1000000", "NaN", "abc"])
    def test_rejects_bad_price(self, client, token_a, price):
        assert _create(client, token_a, price=price).status_code == 400

    @pytest.mark.parametrize("field,value", [("stock", -1), ("stock", 1.5), ("low_stock_threshold", -3)])
    def test_rejects_bad_counts(self, client, token_a, field, value):
        assert _create(client, token_a, **{field: value}).status_code == 400

    def test_unknown_field_rejected(self, client, token_a):
        assert _create(client, token_a, owner_id=99).status_code == 400

    def test_duplicate_sku_conflicts(self, client, token_a):
        assert _create(client, token_a).status_code == 201
        assert _create(client, token_a, name="Other").status_code == 409

    def test_same_sku_allowed_for_other_account(self, client, token_a, token_b):
        assert _create(client, token_a).status_code == 201
        assert _create(client, token_b).status_code == 201

    def test_update(self, client, token_a):
        product = _create(client, token_a).get_json()

        response = client.put(
            f"/api/products/{product['id']}",
            json={"price": 12.5, "stock": 40},
            headers=auth_headers(token_a),
        )

        assert response.status_code == 200
        body = response.get_json()
        assert Decimal(body["price"]) == Decimal("12.50")
        assert body["stock"] == 40
        assert body["is_low_stock"] is False

    def test_update_to_existing_sku_conflicts(self, client, token_a):
        _create(client, token_a)
        other = _create(client, token_a, sku="W-2").get_json()

        response = client.put(f"/api/products/{other['id']}", json={"sku": "W-1"}, headers=auth_headers(token_a))
        assert response.status_code == 409

    def test_update_keeping_own_sku_is_fine(self, client, token_a):
        product = _create(client, token_a).get_json()
        response = client.put(f"/api/products/{product['id']}", json={"sku": "W-1"}, headers=auth_headers(token_a))
        assert response.status_code == 200

    def test_delete(self, client, token_a):
        product = _create(client, token_a).get_json()

        assert client.delete(f"/api/products/{product['id']}", headers=auth_headers(token_a)).status_code == 200
        assert client.get(f"/api/products/{product['id']}", headers=auth_headers(token_a)).status_code == 404
        assert client.delete(f"/api/products/{product['id']}", headers=auth_headers(token_a)).status_code == 404


class TestProductListing:
    def test_ordered_by_name_with_search_and_low_stock(self, client, token_a):
        _create(client, token_a, name="Zeta Pen", sku="Z-1", category="Stationery", stock=100)
        _create(client, token_a, name="Alpha Lamp", sku="A-1", category="Furniture", stock=2)
        _create(client, token_a, name="Mid Pad", sku="M-PAD", category="Stationery", stock=50)
        headers = auth_headers(token_a)

        names = [p["name"] for p in client.get("/api/products", headers=headers).get_json()["items"]]
        assert names == ["Alpha Lamp", "Mid Pad", "Zeta Pen"]

        by_category = client.get("/api/products?q=stationery", headers=headers).get_json()
        assert [p["name"] for p in by_category["items"]] == ["Mid Pad", "Zeta Pen"]

        by_sku = client.get("/api/products?q=m-pad", headers=headers).get_json()
        assert by_sku["count"] == 1

        low = client.get("/api/products?low_stock=1", headers=headers).get_json()
        assert [p["name"] for p in low["items"]] == ["Alpha Lamp"]
