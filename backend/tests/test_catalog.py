"""
Catalog tests: categories and products through the API.
"""

import pytest

from flouz.services import catalog_service


class TestCatalogRequiresAuth:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/categories"),
            ("POST", "/api/categories"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/products/barcode/123"),
            ("DELETE", "/api/products/1"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"


class TestCategories:

    def test_create_uses_default_color(self, client, owner_headers):
        resp = client.post("/api/categories", json={"name": "Snacks"}, headers=owner_headers)
        assert resp.status_code == 201
        assert resp.json["color"] == "#2F80ED"

    def test_rejects_bad_color(self, client, owner_headers):
        resp = client.post("/api/categories", json={"name": "Snacks", "color": "red"}, headers=owner_headers)
        assert resp.status_code == 400

    def test_rejects_unknown_field(self, client, owner_headers):
        resp = client.post("/api/categories", json={"name": "Snacks", "icon": "x"}, headers=owner_headers)
        assert resp.status_code == 400

    def test_update_and_list(self, client, owner_headers):
        created = client.post("/api/categories", json={"name": "Snacks"}, headers=owner_headers).json
        resp = client.put(
            f"/api/categories/{created['id']}", json={"color": "#27AE60"}, headers=owner_headers
        )
        assert resp.status_code == 200
        assert resp.json["color"] == "#27AE60"

        listing = client.get("/api/categories", headers=owner_headers).json
        assert listing["count"] == 1
        assert listing["items"][0]["name"] == "Snacks"

    def test_delete_blocked_while_referenced(self, client, owner_headers, cola):
        category_id = cola.category_id
        resp = client.delete(f"/api/categories/{category_id}", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "CategoryInUse"
        assert resp.json["product_count"] == 1

        other = client.post("/api/categories", json={"name": "Autres"}, headers=owner_headers).json
        moved = client.put(f"/api/products/{cola.id}", json={"category_id": other["id"]}, headers=owner_headers)
        assert moved.status_code == 200

        assert client.delete(f"/api/categories/{category_id}", headers=owner_headers).status_code == 200
        assert client.get(f"/api/categories/{category_id}", headers=owner_headers).status_code == 404


class TestProducts:

    def test_create_product_with_decimal_price(self, client, owner_headers):
        resp = client.post(
            "/api/products",
            json={"name": "Café", "price": "1.80", "barcode": "3017620422003"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        assert resp.json["price"] == "1.80"
        assert resp.json["stock"] == 0
        assert resp.json["is_active"] is True

    def test_numeric_price_is_accepted(self, client, owner_headers):
        resp = client.post("/api/products", json={"name": "Eau", "price": 1.2}, headers=owner_headers)
        assert resp.status_code == 201
        assert resp.json["price"] == "1.20"

    @pytest.mark.parametrize("price", ["-1.00", "1.234", "abc", True])
    def test_rejects_bad_price(self, client, owner_headers, price):
        resp = client.post("/api/products", json={"name": "Bad", "price": price}, headers=owner_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("price_cents", [-500, 10_000_000_000])
    def test_rejects_out_of_range_price_cents(self, client, owner_headers, price_cents):
        resp = client.post(
            "/api/products", json={"name": "Neg", "price_cents": price_cents, "stock": 3}, headers=owner_headers
        )
        assert resp.status_code == 400
        assert "price_cents" in resp.json["error"]
        assert catalog_service.list_products() == []

    def test_update_rejects_negative_price_cents(self, client, owner_headers, cola):
        resp = client.put(f"/api/products/{cola.id}", json={"price_cents": -1}, headers=owner_headers)
        assert resp.status_code == 400
        assert catalog_service.get_product(cola.id).price_cents == 250

    def test_price_required(self, client, owner_headers):
        resp = client.post("/api/products", json={"name": "Free"}, headers=owner_headers)
        assert resp.status_code == 400

    def test_rejects_negative_stock(self, client, owner_headers):
        resp = client.post(
            "/api/products", json={"name": "Chips", "price": "3.50", "stock": -1}, headers=owner_headers
        )
        assert resp.status_code == 400

    def test_rejects_missing_category(self, client, owner_headers):
        resp = client.post(
            "/api/products", json={"name": "Chips", "price": "3.50", "category_id": 999}, headers=owner_headers
        )
        assert resp.status_code == 400

    def test_untracked_stock(self, client, owner_headers):
        resp = client.post(
            "/api/products", json={"name": "Pain", "price": "1.00", "stock": None}, headers=owner_headers
        )
        assert resp.status_code == 201
        assert resp.json["stock"] is None

    def test_barcode_lookup(self, client, owner_headers, cola):
        resp = client.get("/api/products/barcode/5449000000996", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["id"] == cola.id

        assert client.get("/api/products/barcode/000", headers=owner_headers).status_code == 404

    def test_filters(self, client, owner_headers, cola):
        client.post("/api/products", json={"name": "Old", "price": "1.00", "is_active": False}, headers=owner_headers)

        everything = client.get("/api/products", headers=owner_headers).json
        assert everything["count"] == 2

        active = client.get("/api/products?active=true", headers=owner_headers).json
        assert [p["name"] for p in active["items"]] == ["Coca-Cola"]

        by_category = client.get(f"/api/products?category_id={cola.category_id}", headers=owner_headers).json
        assert [p["id"] for p in by_category["items"]] == [cola.id]

    def test_update_and_delete(self, client, owner_headers, cola):
        resp = client.put(f"/api/products/{cola.id}", json={"price": "2.70", "stock": 9}, headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["price"] == "2.70"
        assert resp.json["stock"] == 9

        assert client.delete(f"/api/products/{cola.id}", headers=owner_headers).status_code == 200
        assert client.get(f"/api/products/{cola.id}", headers=owner_headers).status_code == 404
        assert client.delete(f"/api/products/{cola.id}", headers=owner_headers).status_code == 404
