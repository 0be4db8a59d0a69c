"""
Room Catalog Builder

Rooms are not declared anywhere; they are discovered from the booking rows.
Display attributes (name, type, rate) come from the last row scanned for a
room. Availability is decided by the conflict detector, never by those
attributes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..models.booking import BookingField
from ..utils.values import DateLike, clean_text, money, to_decimal
from .conflict_detector import Conflict, ConflictDetector
from .record_store import RecordStore

logger = logging.getLogger(__name__)

STATUS_AVAILABLE = "Available"
STATUS_UNAVAILABLE = "Unavailable"


@dataclass
class RoomAvailability:
    room_number: str
    room_name: str = ""
    room_type: str = ""
    daily_rate: float = 0.0
    available: bool = True
    status: str = STATUS_AVAILABLE
    conflicts: List[Conflict] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomNumber": self.room_number,
            "roomName": self.room_name,
            "roomType": self.room_type,
            "dailyRate": self.daily_rate,
            "available": self.available,
            "status": self.status,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


class RoomCatalog:
    def __init__(self, store: RecordStore, detector: ConflictDetector = None):
        self.store = store
        self.detector = detector or ConflictDetector(store)

    def available_rooms(self, start: DateLike, end: DateLike) -> List[RoomAvailability]:
        """One scan of the store, one availability entry per distinct room."""
        rows = self.store.scan_all()
        rooms: Dict[str, RoomAvailability] = {}

        for row in rows:
            room_number = clean_text(row.get(BookingField.ROOM_NUMBER))
            if not room_number:
                continue
            room = rooms.setdefault(room_number, RoomAvailability(room_number=room_number))
            # Last writer wins for display attributes
            room.room_name = clean_text(row.get(BookingField.ROOM_NAME)) or room.room_name
            room.room_type = clean_text(row.get(BookingField.ROOM_TYPE)) or room.room_type
            rate = row.get(BookingField.DAILY_RATE)
            if rate not in ("", None):
                room.daily_rate = money(to_decimal(rate, to_decimal(room.daily_rate)))

        for room in rooms.values():
            room.conflicts = self.detector.find_conflicts(room.room_number, start, end, rows=rows)
            room.available = not room.conflicts
            room.status = STATUS_AVAILABLE if room.available else STATUS_UNAVAILABLE

        logger.debug(f"Availability computed for {len(rooms)} rooms over {len(rows)} rows")
        return list(rooms.values())
