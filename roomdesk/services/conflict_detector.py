"""
Conflict Detector

Finds active bookings on a room whose [check-in, check-out) range overlaps a
candidate range. Two ranges overlap when

    existing_start < new_end and new_start < existing_end

so a check-out and a check-in on the same day do not conflict.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from ..models.booking import BookingField, TERMINAL_STATUSES
from ..utils.values import DateLike, as_datetime, clean_text, coerce_date
from .record_store import RecordStore, StoredRow

logger = logging.getLogger(__name__)


@dataclass
class Conflict:
    booking_id: str
    guest: str
    check_in: date
    check_out: date
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookingId": self.booking_id,
            "guest": self.guest,
            "checkIn": self.check_in.isoformat(),
            "checkOut": self.check_out.isoformat(),
            "status": self.status,
        }


def ranges_overlap(start_a: DateLike, end_a: DateLike, start_b: DateLike, end_b: DateLike) -> bool:
    """Half-open interval overlap test."""
    return as_datetime(start_a) < as_datetime(end_b) and as_datetime(start_b) < as_datetime(end_a)


def is_active(row: StoredRow) -> bool:
    return clean_text(row.get(BookingField.BOOKING_STATUS)) not in TERMINAL_STATUSES


class ConflictDetector:
    def __init__(self, store: RecordStore):
        self.store = store

    def find_conflicts(
        self,
        room_number: str,
        start: DateLike,
        end: DateLike,
        rows: Optional[Iterable[StoredRow]] = None,
    ) -> List[Conflict]:
        """
        Return the active bookings on `room_number` overlapping [start, end).

        `rows` lets a caller that already scanned the store reuse that scan.
        """
        room = clean_text(room_number)
        if rows is None:
            rows = self.store.scan_all()

        conflicts = []
        for row in rows:
            if clean_text(row.get(BookingField.ROOM_NUMBER)) != room:
                continue
            if not is_active(row):
                continue

            existing_start = coerce_date(row.get(BookingField.CHECK_IN_DATE))
            existing_end = coerce_date(row.get(BookingField.CHECK_OUT_DATE))
            if existing_start is None or existing_end is None:
                logger.warning(f"Skipping row {row.ref} for room {room}: unreadable dates")
                continue

            if ranges_overlap(existing_start, existing_end, start, end):
                conflicts.append(Conflict(
                    booking_id=clean_text(row.get(BookingField.BOOKING_ID)),
                    guest=clean_text(row.get(BookingField.CURRENT_GUEST)) or "Unknown guest",
                    check_in=_as_date(existing_start),
                    check_out=_as_date(existing_end),
                    status=clean_text(row.get(BookingField.BOOKING_STATUS)),
                ))

        return conflicts


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value
