"""
Tests for the keyed lock registry
"""

import threading
import time
import pytest

from roomdesk.exceptions import BookingNotFound
from roomdesk.utils.locks import KeyedLockRegistry


class TestKeyedLockRegistry:
    def test_same_key_is_reentrant(self):
        locks = KeyedLockRegistry()

        with locks.room("101"):
            with locks.room(" 101 "):
                pass

    def test_held_key_times_out_for_other_threads(self):
        locks = KeyedLockRegistry()
        holding = threading.Event()
        release = threading.Event()

        def holder():
            with locks.room("101"):
                holding.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            holding.wait(5)
            with pytest.raises(TimeoutError):
                with locks.room("101", timeout=0.05):
                    pass
            # Other keys are independent
            with locks.room("102", timeout=0.05):
                pass
        finally:
            release.set()
            thread.join()

    def test_room_and_booking_keys_do_not_collide(self):
        locks = KeyedLockRegistry()

        with locks.room("101"):
            assert "room:101" in locks
            assert "booking:101" not in locks

    def test_registry_is_empty_after_hold_returns(self):
        locks = KeyedLockRegistry()

        with locks.room("101"):
            with locks.room("101"):
                assert len(locks) == 1
            assert len(locks) == 1

        assert len(locks) == 0

    def test_lock_is_released_from_registry_after_timeout(self):
        locks = KeyedLockRegistry()
        holding = threading.Event()
        release = threading.Event()

        def holder():
            with locks.booking("BK1"):
                holding.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            holding.wait(5)
            with pytest.raises(TimeoutError):
                with locks.booking("BK1", timeout=0.05):
                    pass
            # Still held by the other thread
            assert "booking:BK1" in locks
        finally:
            release.set()
            thread.join()

        assert len(locks) == 0

    def test_waiter_keeps_the_same_lock(self):
        locks = KeyedLockRegistry()
        holding = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with locks.room("101"):
                holding.set()
                release.wait(5)
                order.append("holder")

        def waiter():
            holding.wait(5)
            with locks.room("101"):
                order.append("waiter")

        threads = [threading.Thread(target=holder), threading.Thread(target=waiter)]
        for t in threads:
            t.start()
        holding.wait(5)
        time.sleep(0.05)
        release.set()
        for t in threads:
            t.join()

        assert order == ["holder", "waiter"]
        assert len(locks) == 0

    def test_unknown_booking_lookups_leave_no_locks_behind(self, service):
        for i in range(50):
            with pytest.raises(BookingNotFound):
                service.check_in(f"NOPE{i}")

        assert len(service.locks) == 0

    def test_completed_bookings_leave_no_locks_behind(self, service):
        from conftest import booking_request

        booking_id = service.create(booking_request()).booking_id
        service.check_in(booking_id)
        service.check_out(booking_id)

        assert len(service.locks) == 0
