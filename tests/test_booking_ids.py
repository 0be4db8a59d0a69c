"""
Tests for booking id generation and collision handling
"""

import random
import re
import pytest

from roomdesk.exceptions import IdentifierExhausted
from roomdesk.services.booking_ids import allocate_booking_id, new_booking_id


class TestNewBookingId:
    def test_format(self):
        booking_id = new_booking_id("BK", clock=lambda: 1717243567.5, rng=random.Random(1))

        assert re.fullmatch(r"BK\d{8}", booking_id)
        assert booking_id[2:8] == "567500"

    def test_custom_prefix(self):
        assert new_booking_id("GH", clock=lambda: 1.0).startswith("GH")


class TestAllocateBookingId:
    def test_returns_first_unused_candidate(self):
        candidates = iter(["BK00000001", "BK00000002"])

        booking_id = allocate_booking_id(
            {"BK00000001"}, generator=lambda prefix: next(candidates)
        )

        assert booking_id == "BK00000002"

    def test_raises_when_every_attempt_collides(self):
        calls = []

        def generator(prefix):
            calls.append(prefix)
            return "BK00000001"

        with pytest.raises(IdentifierExhausted):
            allocate_booking_id({"BK00000001"}, max_attempts=3, generator=generator)

        assert len(calls) == 3
