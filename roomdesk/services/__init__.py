# Services package
from .record_store import RecordStore, InMemoryRecordStore, StoredRow
from .conflict_detector import ConflictDetector, Conflict, ranges_overlap
from .room_catalog import RoomCatalog, RoomAvailability
from .booking_ids import new_booking_id, allocate_booking_id
from .calendar_sink import (
    CalendarSink,
    CalendarEventRequest,
    EventKind,
    NullCalendarSink,
    RecordingCalendarSink,
    WebhookCalendarSink,
)
from .booking_service import BookingService, BookingConfirmation
