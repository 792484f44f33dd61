"""Registration, login and session validation."""
from datetime import datetime, timedelta

from bizsuite.models.module import Module, TenantModule
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.models.user import User, UserRole

from conftest import API, PASSWORD, auth_headers, register_tenant


class TestRegister:
    def test_register_creates_trial_tenant_owner_and_modules(self, client, db):
        before = datetime.utcnow()
        data = register_tenant(client, "acme")

        assert data["token"]
        assert data["tenant"]["slug"] == "acme"
        assert data["tenant"]["status"] == "trial"
        assert data["tenant"]["businessType"] == "inventory"
        assert data["tenant"]["plan"]["name"] == "trial"
        assert data["user"]["role"] == "owner"

        tenant = db.query(Tenant).filter(Tenant.slug == "acme").one()
        expected_end = before + timedelta(days=60)
        assert abs((tenant.trial_end_date - expected_end).total_seconds()) < 60

        users = db.query(User).filter(User.tenant_id == tenant.id).all()
        assert [user.role for user in users] == [UserRole.OWNER]

        enabled = db.query(TenantModule).filter(
            TenantModule.tenant_id == tenant.id,
            TenantModule.is_enabled.is_(True)
        ).count()
        assert enabled == db.query(Module).count() == 5

    def test_duplicate_slug_conflicts(self, client, acme):
        response = client.post(f"{API}/auth/register", json={
            "tenantName": "Other",
            "slug": "acme",
            "businessType": "hotel",
            "email": "someone@else.example.com",
            "password": PASSWORD,
        })
        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"

    def test_duplicate_email_conflicts_across_tenants(self, client, acme):
        response = client.post(f"{API}/auth/register", json={
            "tenantName": "Other",
            "slug": "other",
            "businessType": "hotel",
            "email": "owner@acme.example.com",
            "password": PASSWORD,
        })
        assert response.status_code == 409

    def test_invalid_body_is_a_400_with_field_details(self, client):
        response = client.post(f"{API}/auth/register", json={
            "tenantName": "Bad",
            "slug": "Not A Slug",
            "businessType": "spaceship",
            "email": "nope",
            "password": "short",
        })
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        fields = {detail["field"] for detail in body["details"]}
        assert {"slug", "businessType", "email", "password"} <= fields


class TestLogin:
    def test_login_returns_token_and_tenant(self, client, acme):
        response = client.post(f"{API}/auth/login", json={"email": "owner@acme.example.com", "password": PASSWORD})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "owner@acme.example.com"
        assert data["tenant"]["plan"]["name"] == "trial"

    def test_wrong_password_and_unknown_email_look_the_same(self, client, acme):
        wrong = client.post(f"{API}/auth/login", json={"email": "owner@acme.example.com", "password": "wrong-pass"})
        unknown = client.post(f"{API}/auth/login", json={"email": "ghost@acme.example.com", "password": PASSWORD})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()

    def test_expired_trial_is_detected_at_login(self, client, db, acme):
        tenant = db.query(Tenant).filter(Tenant.slug == "acme").one()
        tenant.trial_end_date = datetime.utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.post(f"{API}/auth/login", json={"email": "owner@acme.example.com", "password": PASSWORD})
        assert response.status_code == 403
        assert "trial has expired" in response.json()["message"]

        db.refresh(tenant)
        assert tenant.status == TenantStatus.EXPIRED

    def test_deactivated_user_cannot_login(self, client, acme, staff_headers):
        staff = client.get(f"{API}/users", headers=acme["headers"], params={"role": "staff"}).json()["data"][0]
        client.delete(f"{API}/users/{staff['id']}", headers=acme["headers"])

        response = client.post(f"{API}/auth/login", json={"email": "staff@acme.example.com", "password": PASSWORD})
        assert response.status_code == 403


class TestSession:
    def test_me_returns_limits_and_modules(self, client, acme):
        response = client.get(f"{API}/auth/me", headers=acme["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tenant"]["limits"]["maxProducts"] == 50
        assert data["tenant"]["daysRemaining"] == 60
        assert "inventory" in data["modules"]
        assert "ecommerce" in data["modules"]

    def test_missing_token_is_401(self, client):
        response = client.get(f"{API}/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_garbage_token_is_401(self, client):
        response = client.get(f"{API}/auth/me", headers=auth_headers("not-a-jwt"))
        assert response.status_code == 401

    def test_admin_token_is_not_a_tenant_token(self, client, admin_headers):
        response = client.get(f"{API}/auth/me", headers=admin_headers)
        assert response.status_code == 401

    def test_tenant_token_is_not_an_admin_token(self, client, acme, platform_admin):
        response = client.get(f"{API}/admin/auth/profile", headers=acme["headers"])
        assert response.status_code == 401

    def test_error_responses_carry_request_id(self, client):
        response = client.get(f"{API}/auth/me", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
