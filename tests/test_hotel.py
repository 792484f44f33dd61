"""Hotel tables and reservations."""
from datetime import datetime, timedelta

import pytest

from conftest import API

SLOT = (datetime.utcnow() + timedelta(days=3)).replace(hour=19, minute=0, second=0, microsecond=0)


def at(moment):
    return moment.isoformat()


@pytest.fixture
def table(client, acme):
    response = client.post(f"{API}/hotel/tables", headers=acme["headers"], json={
        "tableNumber": "A1", "capacity": 4, "floor": "Ground", "section": "Patio"
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


def reserve(client, headers, table_id, when, name="Ada"):
    return client.post(f"{API}/hotel/reservations", headers=headers, json={
        "tableId": table_id,
        "customerName": name,
        "customerEmail": "ada@guests.example.com",
        "reservationTime": at(when),
        "partySize": 2,
    })


class TestTables:
    def test_table_numbers_are_unique_per_tenant(self, client, acme, table, globex):
        duplicate = client.post(f"{API}/hotel/tables", headers=acme["headers"], json={"tableNumber": "A1"})
        assert duplicate.status_code == 409
        other_tenant = client.post(f"{API}/hotel/tables", headers=globex["headers"], json={"tableNumber": "A1"})
        assert other_tenant.status_code == 201

    def test_staff_cannot_create_tables(self, client, acme, staff_headers):
        response = client.post(f"{API}/hotel/tables", headers=staff_headers, json={"tableNumber": "B1"})
        assert response.status_code == 403

    def test_filters(self, client, acme, table):
        client.post(f"{API}/hotel/tables", headers=acme["headers"], json={"tableNumber": "B1", "floor": "First"})
        tables = client.get(f"{API}/hotel/tables", headers=acme["headers"], params={"floor": "Ground"}).json()["data"]
        assert [t["tableNumber"] for t in tables] == ["A1"]

    def test_table_shows_next_reservation(self, client, acme, table):
        reserve(client, acme["headers"], table["id"], SLOT)
        data = client.get(f"{API}/hotel/tables/{table['id']}", headers=acme["headers"]).json()["data"]
        assert data["nextReservation"]["customerName"] == "Ada"

    def test_delete_blocked_by_active_reservation(self, client, acme, table):
        reservation = reserve(client, acme["headers"], table["id"], SLOT).json()["data"]

        blocked = client.delete(f"{API}/hotel/tables/{table['id']}", headers=acme["headers"])
        assert blocked.status_code == 409
        assert "active reservations" in blocked.json()["message"]

        client.delete(f"{API}/hotel/reservations/{reservation['id']}", headers=acme["headers"])
        allowed = client.delete(f"{API}/hotel/tables/{table['id']}", headers=acme["headers"])
        assert allowed.status_code == 200


class TestReservations:
    def test_overlapping_booking_conflicts(self, client, acme, table):
        assert reserve(client, acme["headers"], table["id"], SLOT).status_code == 201
        clash = reserve(client, acme["headers"], table["id"], SLOT + timedelta(minutes=45), name="Bob")
        assert clash.status_code == 409
        later = reserve(client, acme["headers"], table["id"], SLOT + timedelta(hours=2), name="Cy")
        assert later.status_code == 201

    def test_cancelled_booking_frees_the_slot(self, client, acme, table):
        first = reserve(client, acme["headers"], table["id"], SLOT).json()["data"]
        cancelled = client.delete(f"{API}/hotel/reservations/{first['id']}", headers=acme["headers"])
        assert cancelled.json()["data"]["status"] == "cancelled"
        assert reserve(client, acme["headers"], table["id"], SLOT, name="Bob").status_code == 201

    def test_moving_into_a_taken_slot_conflicts(self, client, acme, table):
        reserve(client, acme["headers"], table["id"], SLOT)
        other = reserve(client, acme["headers"], table["id"], SLOT + timedelta(hours=3), name="Bob").json()["data"]
        response = client.put(f"{API}/hotel/reservations/{other['id']}", headers=acme["headers"], json={
            "reservationTime": at(SLOT + timedelta(minutes=30))
        })
        assert response.status_code == 409

    def test_reviving_into_a_taken_slot_conflicts(self, client, acme, table):
        headers = acme["headers"]
        first = reserve(client, headers, table["id"], SLOT).json()["data"]
        client.delete(f"{API}/hotel/reservations/{first['id']}", headers=headers)
        assert reserve(client, headers, table["id"], SLOT, name="Bob").status_code == 201

        response = client.put(f"{API}/hotel/reservations/{first['id']}", headers=headers, json={"status": "confirmed"})
        assert response.status_code == 409
        current = client.get(f"{API}/hotel/reservations/{first['id']}", headers=headers).json()["data"]
        assert current["status"] == "cancelled"

    def test_reviving_into_a_free_slot(self, client, acme, table):
        headers = acme["headers"]
        first = reserve(client, headers, table["id"], SLOT).json()["data"]
        client.delete(f"{API}/hotel/reservations/{first['id']}", headers=headers)

        response = client.put(f"{API}/hotel/reservations/{first['id']}", headers=headers, json={"status": "pending"})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "pending"

    def test_list_by_date_and_status(self, client, acme, table):
        reserve(client, acme["headers"], table["id"], SLOT)
        reserve(client, acme["headers"], table["id"], SLOT + timedelta(days=1), name="Bob")

        on_day = client.get(f"{API}/hotel/reservations", headers=acme["headers"],
                            params={"date": SLOT.date().isoformat()}).json()
        assert on_day["pagination"]["total"] == 1
        assert on_day["data"][0]["table"]["tableNumber"] == "A1"

        pending = client.get(f"{API}/hotel/reservations", headers=acme["headers"], params={"status": "pending"}).json()
        assert pending["pagination"]["total"] == 2

    def test_stats(self, client, acme, table):
        client.put(f"{API}/hotel/tables/{table['id']}", headers=acme["headers"], json={"status": "occupied"})
        client.post(f"{API}/hotel/tables", headers=acme["headers"], json={"tableNumber": "B1"})
        stats = client.get(f"{API}/hotel/stats", headers=acme["headers"]).json()["data"]
        assert stats["totalTables"] == 2
        assert stats["occupiedTables"] == 1
        assert stats["availableTables"] == 1
        assert stats["occupancyRate"] == 50.0
