"""User management inside a tenant."""
from bizsuite.models.tenant import Tenant

from conftest import API, PASSWORD


def first_staff(client, headers):
    return client.get(f"{API}/users", headers=headers, params={"role": "staff"}).json()["data"][0]


class TestUsers:
    def test_list_users(self, client, acme, staff_headers):
        response = client.get(f"{API}/users", headers=acme["headers"]).json()
        assert response["pagination"]["total"] == 2
        assert {u["role"] for u in response["data"]} == {"owner", "staff"}

    def test_staff_cannot_manage_users(self, client, acme, staff_headers):
        assert client.get(f"{API}/users", headers=staff_headers).status_code == 403

    def test_owner_cannot_be_created(self, client, acme):
        response = client.post(f"{API}/users", headers=acme["headers"], json={
            "email": "second-owner@acme.example.com", "password": PASSWORD, "role": "owner"
        })
        assert response.status_code == 400

    def test_owner_row_is_immutable(self, client, acme, db):
        tenant = db.query(Tenant).filter(Tenant.slug == "acme").one()
        tenant.custom_limits = {"maxUsers": 5}
        db.commit()

        client.post(f"{API}/users", headers=acme["headers"], json={
            "email": "admin@acme.example.com", "password": PASSWORD, "role": "admin"
        })
        login = client.post(f"{API}/auth/login", json={"email": "admin@acme.example.com", "password": PASSWORD})
        admin_headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

        owner_id = acme["user"]["id"]
        update = client.put(f"{API}/users/{owner_id}", headers=admin_headers, json={"firstName": "Hacked"})
        delete = client.delete(f"{API}/users/{owner_id}", headers=admin_headers)
        assert update.status_code == delete.status_code == 403

    def test_email_must_stay_unique(self, client, acme, staff_headers, globex):
        staff = first_staff(client, acme["headers"])
        response = client.put(f"{API}/users/{staff['id']}", headers=acme["headers"], json={
            "email": "owner@globex.example.com"
        })
        assert response.status_code == 409

    def test_deactivation_locks_out_existing_tokens(self, client, acme, staff_headers):
        staff = first_staff(client, acme["headers"])
        assert client.get(f"{API}/auth/me", headers=staff_headers).status_code == 200

        client.delete(f"{API}/users/{staff['id']}", headers=acme["headers"])
        assert client.get(f"{API}/auth/me", headers=staff_headers).status_code == 403

    def test_change_password(self, client, acme):
        wrong = client.post(f"{API}/users/change-password", headers=acme["headers"], json={
            "currentPassword": "not-it", "newPassword": "brand-new-password"
        })
        assert wrong.status_code == 400
        assert wrong.json()["details"][0]["field"] == "currentPassword"

        ok = client.post(f"{API}/users/change-password", headers=acme["headers"], json={
            "currentPassword": PASSWORD, "newPassword": "brand-new-password"
        })
        assert ok.status_code == 200
        login = client.post(f"{API}/auth/login", json={
            "email": "owner@acme.example.com", "password": "brand-new-password"
        })
        assert login.status_code == 200
