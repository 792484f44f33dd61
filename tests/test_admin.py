"""Platform admin panel."""
from datetime import date, datetime

from bizsuite.models.admin import AdminAuditLog
from bizsuite.models.plan import Plan
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.services.admin.analytics import tenant_growth

from conftest import ADMIN_EMAIL, API, PASSWORD

NEW_PLAN = {
    "name": "starter",
    "displayName": "Starter",
    "price": 4.99,
    "billingCycle": "monthly",
    "features": {"maxProducts": 20, "maxUsers": 1, "maxTables": 2, "maxStorageMB": 10},
}


def owner_login(client, slug="acme"):
    return client.post(f"{API}/auth/login", json={"email": f"owner@{slug}.example.com", "password": PASSWORD})


class TestAdminAuth:
    def test_login_is_audited(self, client, db, admin_headers):
        profile = client.get(f"{API}/admin/auth/profile", headers=admin_headers).json()["data"]
        assert profile["email"] == ADMIN_EMAIL
        assert profile["role"] == "super_admin"

        entry = db.query(AdminAuditLog).filter(AdminAuditLog.action == "login").one()
        assert entry.target_type == "system"
        assert entry.details == {"method": "email_password"}

    def test_bad_credentials(self, client, platform_admin):
        response = client.post(f"{API}/admin/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"})
        assert response.status_code == 401

    def test_tenant_owner_is_not_an_admin(self, client, acme):
        response = client.post(f"{API}/admin/auth/login", json={
            "email": "owner@acme.example.com", "password": PASSWORD
        })
        assert response.status_code == 401


class TestSuspension:
    def test_suspend_blocks_login_and_existing_tokens(self, client, db, acme, admin_headers):
        tenant_id = acme["tenant"]["id"]
        assert client.get(f"{API}/auth/me", headers=acme["headers"]).status_code == 200

        response = client.post(f"{API}/admin/tenants/{tenant_id}/suspend", headers=admin_headers, json={
            "reason": "non-payment"
        })
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "suspended"

        entry = db.query(AdminAuditLog).filter(AdminAuditLog.action == "suspend_tenant").one()
        assert entry.target_type == "tenant"
        assert entry.target_id == tenant_id
        assert entry.details["reason"] == "non-payment"
        assert entry.details["previous_status"] == "trial"

        login = owner_login(client)
        assert login.status_code == 403
        assert "suspended" in login.json()["message"]
        assert client.get(f"{API}/auth/me", headers=acme["headers"]).status_code == 403
        assert client.get(f"{API}/inventory/products", headers=acme["headers"]).status_code == 403

    def test_activate_restores_access(self, client, acme, admin_headers):
        tenant_id = acme["tenant"]["id"]
        client.post(f"{API}/admin/tenants/{tenant_id}/suspend", headers=admin_headers)

        response = client.post(f"{API}/admin/tenants/{tenant_id}/activate", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "active"

        assert owner_login(client).status_code == 200
        assert client.get(f"{API}/auth/me", headers=acme["headers"]).status_code == 200

    def test_activate_revives_expired_tenant(self, client, db, acme, admin_headers):
        tenant = db.query(Tenant).filter(Tenant.id == acme["tenant"]["id"]).one()
        tenant.status = TenantStatus.EXPIRED
        db.commit()

        response = client.post(f"{API}/admin/tenants/{tenant.id}/activate", headers=admin_headers)
        assert response.status_code == 200
        assert owner_login(client).status_code == 200

    def test_active_tenant_cannot_be_activated_again(self, client, acme, admin_headers):
        response = client.post(f"{API}/admin/tenants/{acme['tenant']['id']}/activate", headers=admin_headers)
        assert response.status_code == 409

    def test_unknown_tenant(self, client, admin_headers):
        response = client.post(f"{API}/admin/tenants/nope/suspend", headers=admin_headers)
        assert response.status_code == 404

    def test_requires_admin_token(self, client, acme):
        response = client.post(f"{API}/admin/tenants/{acme['tenant']['id']}/suspend", headers=acme["headers"])
        assert response.status_code == 401


class TestTenantManagement:
    def test_list_and_search(self, client, acme, globex, admin_headers):
        client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Widget"})

        listed = client.get(f"{API}/admin/tenants", headers=admin_headers).json()
        assert listed["pagination"]["total"] == 2

        found = client.get(f"{API}/admin/tenants", headers=admin_headers, params={"search": "owner@acme"}).json()
        assert [row["slug"] for row in found["data"]] == ["acme"]
        assert found["data"][0]["productCount"] == 1
        assert found["data"][0]["userCount"] == 1

        by_status = client.get(f"{API}/admin/tenants", headers=admin_headers, params={"status": "suspended"}).json()
        assert by_status["data"] == []

    def test_detail(self, client, acme, admin_headers):
        detail = client.get(f"{API}/admin/tenants/{acme['tenant']['id']}", headers=admin_headers).json()["data"]
        assert detail["limits"]["maxUsers"] == 2
        assert [user["role"] for user in detail["users"]] == ["owner"]
        assert len(detail["modules"]) == 5
        assert all(module["isEnabled"] for module in detail["modules"])

    def test_custom_limits_apply_immediately(self, client, db, acme, admin_headers):
        tenant_id = acme["tenant"]["id"]
        response = client.put(f"{API}/admin/tenants/{tenant_id}/limits", headers=admin_headers, json={
            "customLimits": {"maxProducts": 1}
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["customLimits"] == {"maxProducts": 1}
        assert data["limits"]["maxProducts"] == 1
        assert data["limits"]["maxTables"] == 5

        entry = db.query(AdminAuditLog).filter(AdminAuditLog.action == "update_tenant_limits").one()
        assert entry.details["custom_limits"] == {"maxProducts": 1}

        first = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "One"})
        second = client.post(f"{API}/inventory/products", headers=acme["headers"], json={"name": "Two"})
        assert (first.status_code, second.status_code) == (201, 409)

    def test_custom_limits_are_validated(self, client, acme, admin_headers):
        tenant_id = acme["tenant"]["id"]
        unknown = client.put(f"{API}/admin/tenants/{tenant_id}/limits", headers=admin_headers, json={
            "customLimits": {"maxWidgets": 1}
        })
        negative = client.put(f"{API}/admin/tenants/{tenant_id}/limits", headers=admin_headers, json={
            "customLimits": {"maxProducts": -3}
        })
        assert unknown.status_code == negative.status_code == 400

    def test_clearing_custom_limits(self, client, acme, admin_headers):
        tenant_id = acme["tenant"]["id"]
        client.put(f"{API}/admin/tenants/{tenant_id}/limits", headers=admin_headers, json={
            "customLimits": {"maxProducts": 1}
        })
        cleared = client.put(f"{API}/admin/tenants/{tenant_id}/limits", headers=admin_headers, json={
            "customLimits": {}
        }).json()["data"]
        assert cleared["customLimits"] is None
        assert cleared["limits"]["maxProducts"] == 50


class TestPlans:
    def test_create_update_delete(self, client, db, admin_headers):
        created = client.post(f"{API}/admin/plans", headers=admin_headers, json=NEW_PLAN)
        assert created.status_code == 201
        plan = created.json()["data"]
        assert plan["tenantCount"] == 0

        updated = client.put(f"{API}/admin/plans/{plan['id']}", headers=admin_headers, json={"price": 5.99})
        assert updated.json()["data"]["price"] == 5.99

        deleted = client.delete(f"{API}/admin/plans/{plan['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert db.query(Plan).filter(Plan.name == "starter").first() is None

        actions = [entry.action for entry in db.query(AdminAuditLog).filter(AdminAuditLog.target_type == "plan")]
        assert sorted(actions) == ["create_plan", "delete_plan", "update_plan"]

    def test_duplicate_name(self, client, admin_headers):
        response = client.post(f"{API}/admin/plans", headers=admin_headers, json={**NEW_PLAN, "name": "basic"})
        assert response.status_code == 409

    def test_features_must_define_every_limit(self, client, admin_headers):
        response = client.post(f"{API}/admin/plans", headers=admin_headers, json={
            **NEW_PLAN, "features": {"maxProducts": 20}
        })
        assert response.status_code == 400

    def test_plan_in_use_cannot_be_deleted(self, client, db, acme, admin_headers):
        trial = db.query(Plan).filter(Plan.name == "trial").one()
        response = client.delete(f"{API}/admin/plans/{trial.id}", headers=admin_headers)
        assert response.status_code == 409
        assert "tenants" in response.json()["message"]

    def test_list_includes_usage(self, client, acme, globex, admin_headers):
        plans = client.get(f"{API}/admin/plans", headers=admin_headers).json()["data"]
        usage = {plan["name"]: plan["tenantCount"] for plan in plans}
        assert usage == {"trial": 2, "basic": 0, "pro": 0, "enterprise": 0}


class TestSystem:
    def test_health(self, client, admin_headers):
        health = client.get(f"{API}/admin/system/health", headers=admin_headers).json()["data"]
        assert health["status"] == "operational"
        assert health["database"]["status"] == "connected"
        assert health["database"]["latencyMs"] >= 0

        host = health["system"]
        assert host["memoryUsageMB"] > 0
        assert host["totalMemoryMB"] >= host["freeMemoryMB"] >= 0

    def test_audit_log_filter(self, client, acme, admin_headers):
        client.post(f"{API}/admin/tenants/{acme['tenant']['id']}/suspend", headers=admin_headers, json={
            "reason": "fraud"
        })
        logs = client.get(f"{API}/admin/system/audit-logs", headers=admin_headers, params={"type": "tenant"}).json()
        assert logs["pagination"]["total"] == 1
        assert logs["data"][0]["action"] == "suspend_tenant"
        assert logs["data"][0]["admin"]["email"] == ADMIN_EMAIL


class TestAnalytics:
    def test_overview_counts_and_mrr(self, client, db, acme, globex, admin_headers):
        tenant = db.query(Tenant).filter(Tenant.slug == "globex").one()
        tenant.plan = db.query(Plan).filter(Plan.name == "pro").one()
        tenant.status = TenantStatus.ACTIVE
        db.commit()

        overview = client.get(f"{API}/admin/analytics/overview", headers=admin_headers).json()["data"]
        assert overview["totalTenants"] == 2
        assert overview["trialTenants"] == 1
        assert overview["activeTenants"] == 1
        assert overview["totalUsers"] == 2
        assert overview["mrr"] == 29.99

    def test_growth_buckets(self, db, acme):
        tenant = db.query(Tenant).filter(Tenant.slug == "acme").one()
        tenant.created_at = datetime(2024, 3, 10)
        db.commit()

        growth = tenant_growth(db, today=date(2024, 6, 15))
        assert [point["month"] for point in growth] == [
            "2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"
        ]
        assert [point["count"] for point in growth] == [0, 0, 1, 0, 0, 0]

    def test_plan_distribution(self, client, acme, admin_headers):
        shares = client.get(f"{API}/admin/analytics/plans", headers=admin_headers).json()["data"]
        assert {"plan": "Free Trial (2 Months)", "count": 1} in shares
