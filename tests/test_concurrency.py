"""
Concurrency Tests for Double-Booking Prevention

Simultaneous creates for the same room inside one process must produce
exactly one booking; creates for different rooms must not block each other.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from roomdesk.exceptions import RoomUnavailable
from roomdesk.services.booking_service import BookingService
from roomdesk.services.record_store import InMemoryRecordStore
from roomdesk.utils.locks import KeyedLockRegistry

from conftest import booking_request


class SlowRecordStore(InMemoryRecordStore):
    """Widens the gap between scan and append so unguarded writers would interleave"""

    def scan_all(self):
        rows = super().scan_all()
        time.sleep(0.02)
        return rows


def _attempt(service, request):
    try:
        return service.create(request).booking_id
    except RoomUnavailable:
        return None


class TestBookingConcurrency:
    def test_same_room_same_dates_books_once(self):
        store = SlowRecordStore()
        service = BookingService(store, locks=KeyedLockRegistry())
        requests = [booking_request(guest_name=f"Guest {i}") for i in range(8)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda r: _attempt(service, r), requests))

        assert len([r for r in results if r]) == 1
        assert len(store) == 1

    def test_overlapping_ranges_book_once(self):
        store = SlowRecordStore()
        service = BookingService(store, locks=KeyedLockRegistry())
        requests = [
            booking_request(check_in_date=date(2024, 7, 1), check_out_date=date(2024, 7, 4)),
            booking_request(check_in_date=date(2024, 7, 3), check_out_date=date(2024, 7, 6)),
            booking_request(check_in_date=date(2024, 6, 28), check_out_date=date(2024, 7, 2)),
        ]

        with ThreadPoolExecutor(max_workers=3) as pool:
            results = list(pool.map(lambda r: _attempt(service, r), requests))

        assert len([r for r in results if r]) == 1

    def test_services_sharing_the_process_registry_book_once(self):
        store = SlowRecordStore()
        # Separate instances fall back to the module-level registry
        services = [BookingService(store) for _ in range(4)]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(
                lambda s: _attempt(s, booking_request(room_number="shared-7")), services
            ))

        assert len([r for r in results if r]) == 1

    def test_different_rooms_all_succeed(self):
        store = SlowRecordStore()
        service = BookingService(store, locks=KeyedLockRegistry())
        requests = [booking_request(room_number=str(100 + i)) for i in range(5)]

        with ThreadPoolExecutor(max_workers=5) as pool:
            results = list(pool.map(lambda r: _attempt(service, r), requests))

        assert all(results)
        assert len(store) == 5


class TestBookingIdConcurrency:
    """Booking ids stay unique when creates for different rooms race"""

    def test_clashing_ids_across_rooms_are_retried(self):
        store = SlowRecordStore()
        drawn = iter(["BK00000001", "BK00000001", "BK00000001", "BK00000002", "BK00000003", "BK00000004"])
        draw_lock = threading.Lock()

        def generator(prefix):
            with draw_lock:
                return next(drawn)

        service = BookingService(store, locks=KeyedLockRegistry(), id_generator=generator)
        requests = [booking_request(room_number=str(100 + i)) for i in range(3)]

        with ThreadPoolExecutor(max_workers=3) as pool:
            results = list(pool.map(lambda r: _attempt(service, r), requests))

        assert sorted(results) == ["BK00000001", "BK00000002", "BK00000003"]
        assert sorted(r.get("Booking ID") for r in store.scan_all()) == sorted(results)

    def test_sequential_creates_on_different_rooms_skip_taken_ids(self, store):
        drawn = iter(["BK00000001", "BK00000001", "BK00000002"])
        service = BookingService(store, locks=KeyedLockRegistry(), id_generator=lambda prefix: next(drawn))

        first = service.create(booking_request(room_number="101")).booking_id
        second = service.create(booking_request(room_number="102")).booking_id

        assert (first, second) == ("BK00000001", "BK00000002")
