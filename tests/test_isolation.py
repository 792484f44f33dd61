"""Rows owned by one tenant are invisible to every other tenant."""
import pytest

from conftest import API


@pytest.fixture
def acme_rows(client, acme):
    headers = acme["headers"]
    product = client.post(f"{API}/inventory/products", headers=headers, json={"name": "Widget", "stockQuantity": 5})
    table = client.post(f"{API}/hotel/tables", headers=headers, json={"tableNumber": "T1", "capacity": 4})
    expense = client.post(f"{API}/expenses", headers=headers, json={
        "category": "Rent", "amount": 1200, "date": "2024-05-01"
    })
    category = client.post(f"{API}/ecommerce/categories", headers=headers, json={"name": "Tools", "slug": "tools"})
    coupon = client.post(f"{API}/ecommerce/coupons", headers=headers, json={
        "code": "acme5", "discountType": "fixed_amount", "discountValue": 5
    })
    for response in (product, table, expense, category, coupon):
        assert response.status_code == 201, response.text
    return {
        "product": product.json()["data"]["id"],
        "table": table.json()["data"]["id"],
        "expense": expense.json()["data"]["id"],
        "category": category.json()["data"]["id"],
        "coupon": coupon.json()["data"]["id"],
        "owner": acme["user"]["id"],
    }


class TestCrossTenantLookups:
    @pytest.mark.parametrize("path, key", [
        ("/inventory/products/{}", "product"),
        ("/hotel/tables/{}", "table"),
        ("/expenses/{}", "expense"),
        ("/ecommerce/categories/{}", "category"),
        ("/ecommerce/coupons/{}", "coupon"),
        ("/users/{}", "owner"),
    ])
    def test_foreign_id_is_not_found(self, client, acme_rows, globex, path, key):
        response = client.get(API + path.format(acme_rows[key]), headers=globex["headers"])
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_foreign_id_cannot_be_updated_or_deleted(self, client, acme, acme_rows, globex):
        product_id = acme_rows["product"]
        update = client.put(f"{API}/inventory/products/{product_id}", headers=globex["headers"], json={"name": "Stolen"})
        delete = client.delete(f"{API}/inventory/products/{product_id}", headers=globex["headers"])
        adjust = client.post(f"{API}/inventory/products/{product_id}/stock", headers=globex["headers"], json={
            "quantity": -5, "movementType": "sale"
        })
        assert update.status_code == delete.status_code == adjust.status_code == 404

        still_there = client.get(f"{API}/inventory/products/{product_id}", headers=acme["headers"]).json()["data"]
        assert still_there["name"] == "Widget"
        assert still_there["stockQuantity"] == 5

    def test_lists_only_show_own_rows(self, client, acme_rows, globex):
        products = client.get(f"{API}/inventory/products", headers=globex["headers"]).json()
        assert products["data"] == []
        assert products["pagination"]["total"] == 0

        expenses = client.get(f"{API}/expenses", headers=globex["headers"]).json()
        assert expenses["data"] == []

    def test_foreign_table_cannot_be_reserved(self, client, acme_rows, globex):
        response = client.post(f"{API}/hotel/reservations", headers=globex["headers"], json={
            "tableId": acme_rows["table"],
            "customerName": "Mallory",
            "reservationTime": "2030-01-01T19:00:00Z",
            "partySize": 2,
        })
        assert response.status_code == 404

    def test_foreign_parent_category_is_not_found(self, client, acme_rows, globex):
        response = client.post(f"{API}/ecommerce/categories", headers=globex["headers"], json={
            "name": "Sub", "slug": "sub", "parentId": acme_rows["category"]
        })
        assert response.status_code == 404

    def test_coupon_codes_are_per_tenant(self, client, acme_rows, globex):
        response = client.post(f"{API}/ecommerce/coupons/validate", headers=globex["headers"], json={
            "code": "ACME5", "orderTotal": 100
        })
        assert response.status_code == 200
        assert response.json()["data"] == {
            "valid": False, "error": "Coupon not found", "coupon": None, "discountAmount": None
        }
