"""
Shared fixtures for the reservation engine tests.
"""

import pytest
from datetime import datetime

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from roomdesk.models.booking import BookingField
from roomdesk.services.booking_service import BookingService
from roomdesk.services.calendar_sink import RecordingCalendarSink
from roomdesk.services.record_store import InMemoryRecordStore
from roomdesk.utils.locks import KeyedLockRegistry

FIXED_NOW = datetime(2024, 5, 20, 9, 30)


def booking_row(
    booking_id,
    room_number,
    check_in,
    check_out,
    status="Reserved",
    guest="Ada Lovelace",
    rate=75,
    room_name="Garden View",
    room_type="Double",
    notes="",
):
    """A stored booking row keyed by column header."""
    return {
        BookingField.BOOKING_ID: booking_id,
        BookingField.ROOM_NUMBER: room_number,
        BookingField.ROOM_NAME: room_name,
        BookingField.ROOM_TYPE: room_type,
        BookingField.DAILY_RATE: rate,
        BookingField.CHECK_IN_DATE: check_in,
        BookingField.CHECK_OUT_DATE: check_out,
        BookingField.CURRENT_GUEST: guest,
        BookingField.BOOKING_STATUS: status,
        BookingField.NOTES: notes,
    }


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def calendar():
    return RecordingCalendarSink(facility_name="Test House")


@pytest.fixture
def service(store, calendar):
    """Booking service with its own lock registry and a frozen clock"""
    return BookingService(
        store=store,
        calendar=calendar,
        locks=KeyedLockRegistry(),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def client(service):
    """TestClient wired to the in-memory service"""
    from fastapi.testclient import TestClient
    from roomdesk.main import app
    from roomdesk.dependencies import get_booking_service, get_record_store
    from roomdesk.utils.rate_limiter import limiter

    app.dependency_overrides[get_booking_service] = lambda: service
    app.dependency_overrides[get_record_store] = lambda: service.store
    limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def booking_request(**overrides):
    """A valid create request for room 101, 2024-07-01 to 2024-07-04 at 75.00"""
    from decimal import Decimal
    from datetime import date
    from roomdesk.schemas.booking import BookingCreate

    data = {
        "guest_name": "Ada Lovelace",
        "guest_email": "ada@example.com",
        "room_number": "101",
        "room_name": "Garden View",
        "room_type": "Double",
        "daily_rate": Decimal("75.00"),
        "check_in_date": date(2024, 7, 1),
        "check_out_date": date(2024, 7, 4),
        "number_of_guests": 2,
    }
    data.update(overrides)
    return BookingCreate(**data)
