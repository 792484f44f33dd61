"""The caller's own tenant: details, upgrades and stats."""
from bizsuite.models.plan import Plan

from conftest import API


def plan_id(db, name):
    return db.query(Plan).filter(Plan.name == name).one().id


class TestTenant:
    def test_owner_renames_tenant(self, client, acme):
        response = client.put(f"{API}/tenant", headers=acme["headers"], json={"name": "Acme Holdings"})
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Acme Holdings"

    def test_staff_cannot_rename(self, client, acme, staff_headers):
        response = client.put(f"{API}/tenant", headers=staff_headers, json={"name": "Nope"})
        assert response.status_code == 403

    def test_plans_are_listed_by_price(self, client, acme):
        plans = client.get(f"{API}/tenant/plans", headers=acme["headers"]).json()["data"]
        assert [p["name"] for p in plans] == ["trial", "basic", "pro", "enterprise"]

    def test_upgrade_converts_trial(self, client, db, acme):
        response = client.post(f"{API}/tenant/upgrade", headers=acme["headers"], json={
            "planId": plan_id(db, "pro")
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "active"
        assert data["trialConverted"] is True
        assert data["plan"]["name"] == "pro"
        assert data["limits"]["maxProducts"] == 1000
        assert data["daysRemaining"] is None

    def test_upgrade_to_unknown_plan(self, client, acme):
        response = client.post(f"{API}/tenant/upgrade", headers=acme["headers"], json={"planId": "missing"})
        assert response.status_code == 404

    def test_stats(self, client, acme):
        client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Widget"})
        stats = client.get(f"{API}/tenant/stats", headers=acme["headers"]).json()["data"]
        assert stats["users"] == 1
        assert stats["products"] == 1
        assert stats["tables"] == 0
