# Overview: Pytest coverage for cart endpoints, checkout and invoice history over HTTP.

from decimal import Decimal

from conftest import auth_headers


def _product(client, headers, **payload):
    body = {"name": "Widget", "sku": "W-1", "price": "100.00", "stock": 10}
    body.update(payload)
    return client.post("/api/products", json=body, headers=headers).get_json()


class TestCart:
    def test_compose_with_totals(self, client, token_a):
        headers = auth_headers(token_a)
        pen = _product(client, headers, name="Pen", sku="P-1", price="50.00")
        pad = _product(client, headers, name="Pad", sku="P-2", price="25.50")

        client.post("/api/cart/lines", json={"product_id": pen["id"]}, headers=headers)
        response = client.post("/api/cart/lines", json={"product_id": pad["id"], "quantity": 3}, headers=headers)

        assert response.status_code == 201
        cart = response.get_json()
        assert cart["count"] == 2
        assert cart["currency"] == "₹"
        assert Decimal(cart["totals"]["subtotal"]) == Decimal("126.50")
        assert Decimal(cart["totals"]["tax_amount"]) == Decimal("22.77")
        assert Decimal(cart["totals"]["total"]) == Decimal("149.27")

    def test_quantity_and_price_edits(self, client, token_a):
        headers = auth_headers(token_a)
        widget = _product(client, headers)
        client.post("/api/cart/lines", json={"product_id": widget["id"]}, headers=headers)
        base = f"/api/cart/lines/{widget['id']}"

        client.post(f"{base}/increment", headers=headers)
        line = client.post(f"{base}/increment", headers=headers).get_json()["lines"][0]
        assert line["quantity"] == 3

        for _ in range(5):
            line = client.post(f"{base}/decrement", headers=headers).get_json()["lines"][0]
        assert line["quantity"] == 1

        bad = client.put(f"{base}/price", json={"price": -1}, headers=headers)
        assert bad.status_code == 400

        ok = client.put(f"{base}/price", json={"price": "80"}, headers=headers).get_json()
        assert Decimal(ok["lines"][0]["effective_price"]) == Decimal("80.00")

        cleared = client.delete(f"{base}/price", headers=headers).get_json()
        assert cleared["lines"][0]["override_price"] is None

        removed = client.delete(base, headers=headers).get_json()
        assert removed["count"] == 0
        assert client.delete(base, headers=headers).status_code == 404

    def test_unknown_product(self, client, token_a):
        response = client.post("/api/cart/lines", json={"product_id": 9999}, headers=auth_headers(token_a))
        assert response.status_code == 404

    def test_customer_details(self, client, token_a):
        headers = auth_headers(token_a)
        body = client.put("/api/cart/customer", json={"name": "Asha", "phone": "123"}, headers=headers).get_json()
        assert body["customer"]["name"] == "Asha"

        assert client.put("/api/cart/customer", json={"nickname": "x"}, headers=headers).status_code == 400

    def test_clear(self, client, token_a):
        headers = auth_headers(token_a)
        widget = _product(client, headers)
        client.post("/api/cart/lines", json={"product_id": widget["id"]}, headers=headers)

        body = client.delete("/api/cart", headers=headers).get_json()
        assert body["count"] == 0


class TestCheckout:
    def _compose(self, client, headers, quantity=2, stock=10):
        widget = _product(client, headers, stock=stock)
        client.post("/api/cart/lines", json={"product_id": widget["id"], "quantity": quantity}, headers=headers)
        client.put("/api/cart/customer", json={"name": "Asha Traders"}, headers=headers)
        return widget

    def test_checkout_returns_pdf(self, client, token_a):
        headers = auth_headers(token_a)
        widget = self._compose(client, headers)

        response = client.post("/api/cart/checkout", headers=headers)

        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert response.data.startswith(b"%PDF")
        number = response.headers["X-Invoice-Number"]
        assert number.startswith("INV-")
        assert f"{number}.pdf" in response.headers["Content-Disposition"]
        assert response.headers["X-Invoice-State"] == "FINALIZED"
        assert response.headers["X-Invoice-Warnings"] == ""

        stock = client.get(f"/api/products/{widget['id']}", headers=headers).get_json()["stock"]
        assert stock == 8

        cart = client.get("/api/cart", headers=headers).get_json()
        assert cart["count"] == 0
        assert cart["customer"]["name"] == ""

    def test_checkout_uses_company_settings(self, client, token_a):
        headers = auth_headers(token_a)
        client.put("/api/settings/company", json={"invoice_prefix": "ACME", "gst_rate": 5}, headers=headers)
        self._compose(client, headers, quantity=1)

        response = client.post("/api/cart/checkout", headers=headers)
        assert response.headers["X-Invoice-Number"].startswith("ACME-")

        invoice = client.get("/api/invoices", headers=headers).get_json()["items"][0]
        assert Decimal(invoice["gst_amount"]) == Decimal("5.00")
        assert Decimal(invoice["total"]) == Decimal("105.00")

    def test_empty_cart_rejected(self, client, token_a):
        headers = auth_headers(token_a)
        client.put("/api/cart/customer", json={"name": "Asha"}, headers=headers)

        response = client.post("/api/cart/checkout", headers=headers)

        assert response.status_code == 400
        assert client.get("/api/invoices", headers=headers).get_json()["count"] == 0

    def test_missing_customer_rejected_and_cart_kept(self, client, token_a):
        headers = auth_headers(token_a)
        widget = _product(client, headers)
        client.post("/api/cart/lines", json={"product_id": widget["id"]}, headers=headers)

        response = client.post("/api/cart/checkout", headers=headers)

        assert response.status_code == 400
        assert client.get("/api/cart", headers=headers).get_json()["count"] == 1

    def test_oversold_stock_clamped(self, client, token_a):
        headers = auth_headers(token_a)
        widget = self._compose(client, headers, quantity=7, stock=5)

        client.post("/api/cart/checkout", headers=headers)

        assert client.get(f"/api/products/{widget['id']}", headers=headers).get_json()["stock"] == 0


class TestHistory:
    def test_list_get_pdf_delete(self, client, token_a):
        headers = auth_headers(token_a)
        widget = _product(client, headers)
        client.post("/api/cart/lines", json={"product_id": widget["id"]}, headers=headers)
        client.put("/api/cart/customer", json={"name": "Asha Traders"}, headers=headers)
        checkout = client.post("/api/cart/checkout", headers=headers)
        invoice_id = int(checkout.headers["X-Invoice-Id"])

        listed = client.get("/api/invoices", headers=headers).get_json()
        assert listed["count"] == 1

        invoice = client.get(f"/api/invoices/{invoice_id}", headers=headers).get_json()
        assert invoice["invoice_number"] == checkout.headers["X-Invoice-Number"]
        assert invoice["subtotal"] == "100.00"
        assert invoice["items"][0]["unit_price"] == "100.00"

        pdf = client.get(f"/api/invoices/{invoice_id}/pdf", headers=headers)
        assert pdf.status_code == 200
        assert pdf.data.startswith(b"%PDF")

        assert client.delete(f"/api/invoices/{invoice_id}", headers=headers).status_code == 200
        assert client.get(f"/api/invoices/{invoice_id}", headers=headers).status_code == 404
        assert client.get(f"/api/products/{widget['id']}", headers=headers).status_code == 200


class TestDashboard:
    def test_dashboard_figures(self, client, token_a):
        headers = auth_headers(token_a)
        widget = _product(client, headers, stock=3)
        _product(client, headers, name="Lamp", sku="L-1", price="10.00", stock=50)
        client.post("/api/cart/lines", json={"product_id": widget["id"]}, headers=headers)
        client.put("/api/cart/customer", json={"name": "Asha"}, headers=headers)
        client.post("/api/cart/checkout", headers=headers)

        body = client.get("/api/reports/dashboard", headers=headers).get_json()

        assert body["inventory"]["total_products"] == 2
        assert body["inventory"]["total_stock"] == 52
        assert Decimal(body["inventory"]["inventory_value"]) == Decimal("700.00")
        assert body["inventory"]["low_stock_count"] == 1
        assert body["invoices"]["invoice_count"] == 1
        assert Decimal(body["invoices"]["revenue"]) == Decimal("118.00")
        assert Decimal(body["invoices"]["gst_collected"]) == Decimal("18.00")
