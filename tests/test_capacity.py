"""Plan limits gate resource creation."""
from bizsuite.models.inventory import Product
from bizsuite.models.plan import Plan
from bizsuite.models.tenant import Tenant

from conftest import API, PASSWORD


def move_to_plan(db, slug, plan_name, custom_limits=None):
    tenant = db.query(Tenant).filter(Tenant.slug == slug).one()
    tenant.plan = db.query(Plan).filter(Plan.name == plan_name).one()
    tenant.custom_limits = custom_limits
    db.commit()
    return tenant


def product_count(db, tenant_id):
    return db.query(Product).filter(Product.tenant_id == tenant_id).count()


class TestProductCapacity:
    def test_basic_plan_stops_at_one_hundred_products(self, client, db, acme):
        tenant = move_to_plan(db, "acme", "basic")
        db.add_all([Product(tenant_id=tenant.id, name=f"Item {i}") for i in range(100)])
        db.commit()

        response = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Item 101"})

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Conflict"
        assert "Basic Plan" in body["message"]
        assert "100" in body["message"]
        assert product_count(db, tenant.id) == 100

    def test_last_slot_is_still_usable(self, client, db, acme):
        tenant = move_to_plan(db, "acme", "basic", {"maxProducts": 2})
        first = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "One"})
        second = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Two"})
        third = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Three"})
        assert (first.status_code, second.status_code, third.status_code) == (201, 201, 409)
        assert product_count(db, tenant.id) == 2

    def test_unlimited_plan_never_counts(self, client, db, acme):
        tenant = move_to_plan(db, "acme", "enterprise")
        db.add_all([Product(tenant_id=tenant.id, name=f"Item {i}") for i in range(120)])
        db.commit()

        response = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "One more"})
        assert response.status_code == 201

    def test_override_beats_plan(self, client, db, acme):
        move_to_plan(db, "acme", "enterprise", {"maxProducts": 0})
        response = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Blocked"})
        assert response.status_code == 409

    def test_unconfigured_limit_fails_closed(self, client, db, acme):
        plan = Plan(name="bare", display_name="Bare", price=0, features={"maxUsers": 5})
        db.add(plan)
        db.commit()
        move_to_plan(db, "acme", "bare")

        response = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Nope"})
        assert response.status_code == 500
        assert response.json()["error"] == "InternalError"
        assert "maxProducts" in response.json()["message"]


class TestOtherCapacities:
    def test_user_limit_counts_the_owner(self, client, acme, staff_headers):
        # Trial plan allows two users: the owner and the staff member
        response = client.post(f"{API}/users", headers=acme["headers"], json={
            "email": "third@acme.example.com", "password": PASSWORD, "role": "staff"
        })
        assert response.status_code == 409

    def test_table_limit(self, client, db, acme):
        move_to_plan(db, "acme", "trial", {"maxTables": 1})
        first = client.post(f"{API}/hotel/tables", headers=acme["headers"], json={"tableNumber": "1"})
        second = client.post(f"{API}/hotel/tables", headers=acme["headers"], json={"tableNumber": "2"})
        assert (first.status_code, second.status_code) == (201, 409)

    def test_store_products_use_their_own_count(self, client, db, acme):
        move_to_plan(db, "acme", "trial", {"maxProducts": 1})
        inventory = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Stock item"})
        store = client.post(f"{API}/ecommerce/products", headers=acme["headers"], json={
            "name": "Store item", "slug": "store-item", "price": 10
        })
        second_store = client.post(f"{API}/ecommerce/products", headers=acme["headers"], json={
            "name": "Store item 2", "slug": "store-item-2", "price": 10
        })
        assert (inventory.status_code, store.status_code, second_store.status_code) == (201, 201, 409)
