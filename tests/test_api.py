"""
API tests for the reservation endpoints
"""

import pytest
from unittest.mock import MagicMock

from roomdesk.exceptions import RecordStoreError

from conftest import booking_row

BOOKING_PAYLOAD = {
    "guestName": "Ada Lovelace",
    "guestEmail": "ada@example.com",
    "roomNumber": 101,
    "roomName": "Garden View",
    "dailyRate": 75,
    "checkInDate": "2024-07-01",
    "checkOutDate": "2024-07-04",
    "numberOfGuests": 2,
}


class TestAvailabilityEndpoint:
    def test_empty_store(self, client):
        response = client.post("/api/availability", json={"startDate": "2024-06-01", "endDate": "2024-06-04"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "rooms": [],
            "nights": 3,
            "dateRange": "2024-06-01 to 2024-06-04",
        }

    def test_conflicts_are_listed(self, client, store):
        store.append(booking_row("BK1", "101", "2024-06-01", "2024-06-05", guest="Grace Hopper"))

        body = client.post("/api/availability", json={"startDate": "2024-06-03", "endDate": "2024-06-07"}).json()

        room = body["rooms"][0]
        assert room["roomNumber"] == "101"
        assert room["available"] is False
        assert room["conflicts"][0] == {
            "bookingId": "BK1",
            "guest": "Grace Hopper",
            "checkIn": "2024-06-01",
            "checkOut": "2024-06-05",
            "status": "Reserved",
        }

    def test_bad_range_is_reported_in_body(self, client):
        response = client.post("/api/availability", json={"startDate": "2024-06-05", "endDate": "2024-06-01"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert "rooms" not in body
        assert body["error"]


class TestBookingEndpoints:
    def test_create(self, client, store):
        response = client.post("/api/bookings", json=BOOKING_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["bookingId"].startswith("BK")
        assert "Total: 225.00" in body["message"]
        assert len(store) == 1

    def test_create_conflict(self, client, store):
        store.append(booking_row("BK1", "101", "2024-07-02", "2024-07-05"))

        response = client.post("/api/bookings", json=BOOKING_PAYLOAD)

        assert response.status_code == 409
        assert "Room 101 is not available" in response.json()["detail"]

    def test_create_with_dates_out_of_order(self, client):
        payload = dict(BOOKING_PAYLOAD, checkOutDate="2024-06-30")

        response = client.post("/api/bookings", json=payload)

        assert response.status_code == 400

    def test_create_without_dates_is_unprocessable(self, client):
        payload = {k: v for k, v in BOOKING_PAYLOAD.items() if k != "checkInDate"}

        assert client.post("/api/bookings", json=payload).status_code == 422

    def test_guest_name_markup_is_stripped(self, client, store):
        payload = dict(BOOKING_PAYLOAD, guestName="<script>alert(1)</script>Ada")

        client.post("/api/bookings", json=payload)

        assert store.scan_all()[0].get("Current Guest") == "Ada"

    def test_lifecycle(self, client):
        booking_id = client.post("/api/bookings", json=BOOKING_PAYLOAD).json()["bookingId"]

        response = client.post(f"/api/bookings/{booking_id}/check-in")
        assert response.status_code == 200
        assert response.json()["message"].startswith("Guest Ada Lovelace checked in")

        response = client.post(f"/api/bookings/{booking_id}/check-out")
        assert response.status_code == 200

        record = client.get(f"/api/bookings/{booking_id}").json()
        assert record["Booking Status"] == "Checked-Out"
        assert record["Current Guest"] == ""

    def test_cancel_with_reason(self, client):
        booking_id = client.post("/api/bookings", json=BOOKING_PAYLOAD).json()["bookingId"]

        response = client.post(f"/api/bookings/{booking_id}/cancel", json={"reason": "Plans changed"})

        assert response.status_code == 200
        record = client.get(f"/api/bookings/{booking_id}").json()
        assert record["Booking Status"] == "Cancelled"
        assert record["Notes"].endswith("Cancelled: Plans changed")

    def test_cancel_without_body(self, client):
        booking_id = client.post("/api/bookings", json=BOOKING_PAYLOAD).json()["bookingId"]

        assert client.post(f"/api/bookings/{booking_id}/cancel").status_code == 200

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/bookings/BK00000000"),
        ("post", "/api/bookings/BK00000000/check-in"),
        ("post", "/api/bookings/BK00000000/check-out"),
        ("post", "/api/bookings/BK00000000/cancel"),
    ])
    def test_unknown_booking(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 404
        assert response.json()["detail"] == "Booking ID BK00000000 not found"

    def test_store_failure_is_503(self, client, service):
        service.store = MagicMock()
        service.store.scan_all.side_effect = RecordStoreError("sheet offline")

        response = client.post("/api/bookings/BK1/check-in")

        assert response.status_code == 503


class TestLeaseEndpoint:
    def test_publish_lease(self, client, calendar):
        response = client.post("/api/leases/calendar", json={
            "tenantName": "Alan Turing",
            "roomNumber": 201,
            "leaseStart": "2024-08-01",
            "leaseEnd": "2025-07-31",
            "monthlyRent": 950,
        })

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert calendar.events[0].title == "Alan Turing - Room 201 (Lease)"

    def test_lease_end_before_start(self, client):
        response = client.post("/api/leases/calendar", json={
            "tenantName": "Alan Turing",
            "roomNumber": "201",
            "leaseStart": "2024-08-01",
            "leaseEnd": "2024-07-01",
        })

        assert response.status_code == 400


class TestHealthAndMiddleware:
    def test_live(self, client):
        assert client.get("/health/live").json()["status"] == "alive"

    def test_ready(self, client, store):
        store.append(booking_row("BK1", "101", "2024-06-01", "2024-06-05"))

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["record_store"]["rows"] == 1

    def test_not_ready_when_store_fails(self, client):
        from roomdesk.main import app
        from roomdesk.dependencies import get_record_store

        broken = MagicMock()
        broken.scan_all.side_effect = RecordStoreError("sheet offline")
        app.dependency_overrides[get_record_store] = lambda: broken

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["record_store"]["status"] == "down"

    def test_request_id_is_echoed(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"


class TestRateLimiting:
    def test_booking_create_is_limited_per_client(self, client):
        from roomdesk.utils.rate_limiter import get_rate_limit

        allowed = int(get_rate_limit("booking_create").split("/")[0])
        payload = dict(BOOKING_PAYLOAD, checkOutDate="2024-06-30")
        headers = {"X-Forwarded-For": "203.0.113.7"}

        for _ in range(allowed):
            assert client.post("/api/bookings", json=payload, headers=headers).status_code == 400

        response = client.post("/api/bookings", json=payload, headers=headers)
        assert response.status_code == 429

        # Another client still gets through
        other = client.post("/api/bookings", json=payload, headers={"X-Forwarded-For": "198.51.100.2"})
        assert other.status_code == 400

    def test_real_client_ip_prefers_forwarded_header(self):
        from roomdesk.utils.rate_limiter import get_real_client_ip

        request = MagicMock()
        request.headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

        assert get_real_client_ip(request) == "203.0.113.7"

    def test_security_headers(self, client):
        response = client.get("/health/live")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
