"""Expense tracking."""
from datetime import date

from bizsuite.core.context import TenantContext
from bizsuite.models.expense import Expense
from bizsuite.models.user import UserRole
from bizsuite.services.expenses import expense_summary, months_back

from conftest import API


def add_expense(client, headers, category, amount, day):
    response = client.post(f"{API}/expenses", headers=headers, json={
        "category": category, "amount": amount, "date": day
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestMonthsBack:
    def test_same_year(self):
        assert months_back(date(2024, 6, 15), 6) == date(2024, 1, 1)

    def test_crosses_year_boundary(self):
        assert months_back(date(2024, 2, 29), 6) == date(2023, 9, 1)

    def test_one_month_is_current_month(self):
        assert months_back(date(2024, 12, 31), 1) == date(2024, 12, 1)


class TestExpenses:
    def test_crud(self, client, acme):
        expense = add_expense(client, acme["headers"], "Rent", 1200, "2024-05-01")
        assert expense["amount"] == 1200
        assert expense["createdBy"] == acme["user"]["id"]

        updated = client.put(f"{API}/expenses/{expense['id']}", headers=acme["headers"], json={"amount": 1300})
        assert updated.json()["data"]["amount"] == 1300
        assert updated.json()["data"]["category"] == "Rent"

        assert client.delete(f"{API}/expenses/{expense['id']}", headers=acme["headers"]).status_code == 200
        assert client.get(f"{API}/expenses/{expense['id']}", headers=acme["headers"]).status_code == 404

    def test_amount_must_be_positive(self, client, acme):
        response = client.post(f"{API}/expenses", headers=acme["headers"], json={
            "category": "Rent", "amount": 0, "date": "2024-05-01"
        })
        assert response.status_code == 400

    def test_date_range_filter(self, client, acme):
        add_expense(client, acme["headers"], "Rent", 100, "2024-04-30")
        add_expense(client, acme["headers"], "Food", 50, "2024-05-10")
        response = client.get(f"{API}/expenses", headers=acme["headers"], params={
            "startDate": "2024-05-01", "endDate": "2024-05-31"
        }).json()
        assert [e["category"] for e in response["data"]] == ["Food"]

    def test_summary_and_categories(self, client, acme):
        add_expense(client, acme["headers"], "Rent", 100, "2024-05-01")
        add_expense(client, acme["headers"], "Rent", 50.5, "2024-05-15")
        add_expense(client, acme["headers"], "Food", 20, "2024-05-20")

        summary = client.get(f"{API}/expenses/summary", headers=acme["headers"], params={
            "startDate": "2024-05-01", "endDate": "2024-05-31"
        }).json()["data"]
        assert summary["totalAmount"] == 170.5
        assert summary["totalCount"] == 3
        assert summary["byCategory"] == [
            {"category": "Food", "total": 20.0, "count": 1},
            {"category": "Rent", "total": 150.5, "count": 2},
        ]

        categories = client.get(f"{API}/expenses/categories", headers=acme["headers"]).json()["data"]
        assert categories == ["Food", "Rent"]

    def test_monthly_trend_covers_six_months(self, db, acme):
        tenant_id = acme["tenant"]["id"]
        db.add_all([
            Expense(tenant_id=tenant_id, category="Rent", amount=100, date=date(2024, 6, 1)),
            Expense(tenant_id=tenant_id, category="Rent", amount=40, date=date(2024, 1, 31)),
            Expense(tenant_id=tenant_id, category="Rent", amount=999, date=date(2023, 12, 31)),
        ])
        db.commit()
        ctx = TenantContext(tenant_id=tenant_id, user_id=acme["user"]["id"], role=UserRole.OWNER)

        summary = expense_summary(db, ctx, today=date(2024, 6, 20))
        assert summary["monthly_trend"] == [
            {"month": "2024-06", "total": 100.0},
            {"month": "2024-01", "total": 40.0},
        ]
