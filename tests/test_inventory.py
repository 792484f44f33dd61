"""Inventory products, stock adjustments and history."""
import pytest

from conftest import API


@pytest.fixture
def widget(client, acme):
    response = client.post(f"{API}/inventory/products", headers=acme["headers"], json={
        "name": "Widget",
        "sku": "W-1",
        "category": "Parts",
        "price": 2.5,
        "stockQuantity": 20,
        "lowStockThreshold": 5,
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestProducts:
    def test_initial_stock_is_logged(self, client, acme, widget):
        history = client.get(f"{API}/inventory/stock-history", headers=acme["headers"],
                             params={"productId": widget["id"]}).json()
        assert history["pagination"]["total"] == 1
        movement = history["data"][0]
        assert movement["quantity"] == 20
        assert movement["movementType"] == "adjustment"
        assert movement["product"]["name"] == "Widget"

    def test_zero_initial_stock_logs_nothing(self, client, acme):
        product = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Empty"}).json()
        history = client.get(f"{API}/inventory/stock-history", headers=acme["headers"],
                             params={"productId": product["data"]["id"]}).json()
        assert history["data"] == []

    def test_update_does_not_touch_stock(self, client, acme, widget):
        response = client.put(f"{API}/inventory/products/{widget['id']}", headers=acme["headers"], json={
            "name": "Widget Pro", "stockQuantity": 999
        })
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Widget Pro"
        assert response.json()["data"]["stockQuantity"] == 20

    def test_filters_and_pagination(self, client, acme, widget):
        for i in range(3):
            client.post(f"{API}/inventory/products", headers=acme["headers"], json={
                "name": f"Bolt {i}", "category": "Hardware"
            })

        by_category = client.get(f"{API}/inventory/products", headers=acme["headers"],
                                 params={"category": "Hardware"}).json()
        assert by_category["pagination"]["total"] == 3

        searched = client.get(f"{API}/inventory/products", headers=acme["headers"], params={"search": "w-1"}).json()
        assert [p["id"] for p in searched["data"]] == [widget["id"]]

        paged = client.get(f"{API}/inventory/products", headers=acme["headers"], params={"page": 2, "limit": 3}).json()
        assert paged["pagination"] == {"total": 4, "page": 2, "limit": 3, "totalPages": 2}
        assert len(paged["data"]) == 1

    def test_page_size_is_capped(self, client, acme):
        response = client.get(f"{API}/inventory/products", headers=acme["headers"], params={"limit": 101})
        assert response.status_code == 400

    def test_staff_cannot_delete(self, client, acme, widget, staff_headers):
        response = client.delete(f"{API}/inventory/products/{widget['id']}", headers=staff_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_owner_deletes_product_with_history(self, client, acme, widget):
        response = client.delete(f"{API}/inventory/products/{widget['id']}", headers=acme["headers"])
        assert response.status_code == 200
        assert client.get(f"{API}/inventory/products/{widget['id']}", headers=acme["headers"]).status_code == 404


class TestStockAdjustments:
    def test_sale_reduces_stock_and_logs_movement(self, client, acme, widget, staff_headers):
        response = client.post(f"{API}/inventory/products/{widget['id']}/stock", headers=staff_headers, json={
            "quantity": -8, "movementType": "sale", "notes": "Counter sale"
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["product"]["stockQuantity"] == 12
        assert data["movement"]["quantity"] == -8
        assert data["movement"]["notes"] == "Counter sale"

    def test_cannot_go_below_zero(self, client, acme, widget):
        response = client.post(f"{API}/inventory/products/{widget['id']}/stock", headers=acme["headers"], json={
            "quantity": -21, "movementType": "sale"
        })
        assert response.status_code == 409

        product = client.get(f"{API}/inventory/products/{widget['id']}", headers=acme["headers"]).json()["data"]
        assert product["stockQuantity"] == 20
        history = client.get(f"{API}/inventory/stock-history", headers=acme["headers"]).json()
        assert history["pagination"]["total"] == 1

    def test_zero_quantity_is_invalid(self, client, acme, widget):
        response = client.post(f"{API}/inventory/products/{widget['id']}/stock", headers=acme["headers"], json={
            "quantity": 0, "movementType": "adjustment"
        })
        assert response.status_code == 400

    def test_low_stock_and_stats(self, client, acme, widget):
        client.post(f"{API}/inventory/products/{widget['id']}/stock", headers=acme["headers"], json={
            "quantity": -16, "movementType": "sale"
        })
        low = client.get(f"{API}/inventory/low-stock", headers=acme["headers"]).json()["data"]
        assert [p["id"] for p in low] == [widget["id"]]
        assert low[0]["isLowStock"] is True

        stats = client.get(f"{API}/inventory/stats", headers=acme["headers"]).json()["data"]
        assert stats["totalProducts"] == 1
        assert stats["lowStockCount"] == 1
        assert stats["totalStockUnits"] == 4
        assert stats["categoryCounts"] == [{"category": "Parts", "count": 1}]
