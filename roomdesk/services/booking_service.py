"""
Booking Lifecycle Manager

Owns every write to the booking table:
- availability(): read-only report, never raises
- create(): conflict check + append under the room's lock, id allocation
  under a lock shared by all rooms, then calendar event
- check_in() / check_out() / cancel(): unconditional status updates that
  append a timestamped line to Notes
- record_tenant_lease(): calendar projection of a tenant lease

State machine: Reserved -> Checked-In -> Checked-Out, Reserved -> Cancelled.
Transitions are not order-enforced; repeating one appends another note.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import BookingNotFound, RoomUnavailable, ValidationError
from ..models.booking import BookingField, BookingSource, BookingStatus, PaymentStatus
from ..schemas.booking import BookingCreate, LeaseCalendarRequest
from ..utils.locks import KeyedLockRegistry
from ..utils.logging_config import get_logger
from ..utils.values import clean_text, coerce_date, count_nights, money, to_decimal
from .booking_ids import DEFAULT_PREFIX, allocate_booking_id, new_booking_id
from .calendar_sink import CalendarSink, NullCalendarSink, guest_booking_event, tenant_lease_event
from .conflict_detector import ConflictDetector
from .record_store import RecordStore, StoredRow
from .room_catalog import RoomCatalog

logger = get_logger(__name__)

# Shared by every service instance in the process
default_locks = KeyedLockRegistry()


@dataclass
class BookingConfirmation:
    booking_id: str
    message: str
    nights: int
    total_amount: float
    calendar_published: bool


class BookingService:
    def __init__(
        self,
        store: RecordStore,
        calendar: Optional[CalendarSink] = None,
        locks: Optional[KeyedLockRegistry] = None,
        id_prefix: str = DEFAULT_PREFIX,
        id_max_attempts: int = 5,
        id_generator: Callable[[str], str] = new_booking_id,
        default_payment_status: str = PaymentStatus.PENDING.value,
        default_source: str = BookingSource.DIRECT.value,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.calendar = calendar or NullCalendarSink()
        self.locks = locks if locks is not None else default_locks
        self.detector = ConflictDetector(store)
        self.catalog = RoomCatalog(store, self.detector)
        self.id_prefix = id_prefix
        self.id_max_attempts = id_max_attempts
        self.id_generator = id_generator
        self.default_payment_status = default_payment_status
        self.default_source = default_source
        self.clock = clock

    @classmethod
    def from_settings(cls, settings, store: RecordStore, calendar: CalendarSink) -> "BookingService":
        return cls(
            store=store,
            calendar=calendar,
            id_prefix=settings.booking_id_prefix,
            id_max_attempts=settings.booking_id_max_attempts,
            default_payment_status=settings.default_payment_status,
            default_source=settings.default_booking_source,
        )

    # ========== Availability ==========

    def availability(self, start_date: Any, end_date: Any) -> Dict[str, Any]:
        """Availability report for every known room. Failures come back as {success: False}."""
        try:
            start = coerce_date(start_date)
            end = coerce_date(end_date)
            if start is None or end is None:
                return {"success": False, "error": "Start date and end date are required (YYYY-MM-DD)"}
            nights = count_nights(start, end)
            if nights <= 0:
                return {"success": False, "error": "End date must be after start date"}

            rooms = self.catalog.available_rooms(start, end)
            return {
                "success": True,
                "rooms": [r.to_dict() for r in rooms],
                "nights": nights,
                "dateRange": f"{_iso(start)} to {_iso(end)}",
            }
        except Exception as e:
            logger.exception(f"Availability check failed: {e}")
            return {"success": False, "error": str(e)}

    # ========== Create ==========

    def create(self, request: BookingCreate) -> BookingConfirmation:
        guest_name = clean_text(request.guest_name)
        room_number = clean_text(request.room_number)
        check_in = request.check_in_date
        check_out = request.check_out_date

        if not guest_name:
            raise ValidationError("Guest name is required", field="guestName")
        if not room_number:
            raise ValidationError("Room number is required", field="roomNumber")
        if check_in is None or check_out is None:
            raise ValidationError("Check-in and check-out dates are required", field="checkInDate")
        if check_out <= check_in:
            raise ValidationError("Check-out date must be after check-in date", field="checkOutDate")

        with self.locks.room(room_number):
            rows = self.store.scan_all()

            conflicts = self.detector.find_conflicts(room_number, check_in, check_out, rows=rows)
            if conflicts:
                error = RoomUnavailable(room_number, conflicts)
                logger.booking_rejected(room_number, error.message)
                raise error

            known = self._last_room_row(room_number, rows)
            daily_rate = request.daily_rate
            if daily_rate is None and known is not None:
                daily_rate = to_decimal(known.get(BookingField.DAILY_RATE), None)
            if daily_rate is None:
                raise ValidationError("Daily rate is required for a new room", field="dailyRate")

            nights = count_nights(check_in, check_out)
            total = Decimal(daily_rate) * nights

            room_name = clean_text(request.room_name) or (clean_text(known.get(BookingField.ROOM_NAME)) if known else "")
            room_type = clean_text(request.room_type) or (clean_text(known.get(BookingField.ROOM_TYPE)) if known else "")

            notes = self._note_line("Booking created")
            if request.notes:
                notes = f"{request.notes}\n{notes}"

            record = {
                BookingField.BOOKING_ID: "",
                BookingField.ROOM_NUMBER: room_number,
                BookingField.ROOM_NAME: room_name,
                BookingField.ROOM_TYPE: room_type,
                BookingField.DAILY_RATE: money(Decimal(daily_rate)),
                BookingField.CHECK_IN_DATE: check_in.isoformat(),
                BookingField.CHECK_OUT_DATE: check_out.isoformat(),
                BookingField.NIGHTS: nights,
                BookingField.NUMBER_OF_GUESTS: request.number_of_guests,
                BookingField.CURRENT_GUEST: guest_name,
                BookingField.GUEST_EMAIL: clean_text(request.guest_email),
                BookingField.GUEST_PHONE: clean_text(request.guest_phone),
                BookingField.PURPOSE_OF_VISIT: clean_text(request.purpose_of_visit),
                BookingField.TOTAL_AMOUNT: money(total),
                BookingField.PAYMENT_STATUS: clean_text(request.payment_status) or self.default_payment_status,
                BookingField.BOOKING_STATUS: BookingStatus.RESERVED.value,
                BookingField.SOURCE: clean_text(request.booking_source) or self.default_source,
                BookingField.NOTES: notes,
            }

            # Ids are unique across rooms, so the clash check re-reads the whole
            # table under a lock every create shares
            with self.locks.booking_ids():
                existing_ids = {clean_text(r.get(BookingField.BOOKING_ID)) for r in self.store.scan_all()}
                booking_id = allocate_booking_id(
                    existing_ids,
                    prefix=self.id_prefix,
                    max_attempts=self.id_max_attempts,
                    generator=self.id_generator,
                )
                record[BookingField.BOOKING_ID] = booking_id
                self.store.append(record)

        logger.booking_created(booking_id, room_number, guest_name, money(total))

        published = self.calendar.publish(guest_booking_event(
            booking_id=booking_id,
            room_number=room_number,
            room_name=room_name,
            guest_name=guest_name,
            check_in=check_in,
            check_out=check_out,
            guest_email=clean_text(request.guest_email),
            guest_phone=clean_text(request.guest_phone),
            number_of_guests=request.number_of_guests,
        ))

        message = (
            f"Booking confirmed! Booking ID: {booking_id}. "
            f"Room {room_number} for {guest_name}, {check_in.isoformat()} to {check_out.isoformat()} "
            f"({nights} night{'s' if nights != 1 else ''}). Total: {money(total):.2f}"
        )
        return BookingConfirmation(
            booking_id=booking_id,
            message=message,
            nights=nights,
            total_amount=money(total),
            calendar_published=published,
        )

    # ========== Lifecycle transitions ==========

    def check_in(self, booking_id: str) -> str:
        row = self._transition(booking_id, BookingStatus.CHECKED_IN, "Checked in")
        return (
            f"Guest {clean_text(row.get(BookingField.CURRENT_GUEST))} checked in to "
            f"Room {clean_text(row.get(BookingField.ROOM_NUMBER))} (Booking {booking_id})"
        )

    def check_out(self, booking_id: str) -> str:
        row = self._transition(
            booking_id,
            BookingStatus.CHECKED_OUT,
            "Checked out",
            updates={BookingField.CURRENT_GUEST: ""},
        )
        return (
            f"Guest {clean_text(row.get(BookingField.CURRENT_GUEST))} checked out of "
            f"Room {clean_text(row.get(BookingField.ROOM_NUMBER))} (Booking {booking_id})"
        )

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> str:
        note = f"Cancelled: {reason}" if reason else "Cancelled"
        row = self._transition(booking_id, BookingStatus.CANCELLED, note)
        return (
            f"Booking {booking_id} for Room {clean_text(row.get(BookingField.ROOM_NUMBER))} cancelled"
        )

    def get_booking(self, booking_id: str) -> Dict[str, Any]:
        return dict(self._find_row(booking_id, self.store.scan_all()).values)

    # ========== Tenant leases ==========

    def record_tenant_lease(self, request: LeaseCalendarRequest) -> str:
        tenant_name = clean_text(request.tenant_name)
        room_number = clean_text(request.room_number)
        if not tenant_name:
            raise ValidationError("Tenant name is required", field="tenantName")
        if not room_number:
            raise ValidationError("Room number is required", field="roomNumber")
        if request.lease_end <= request.lease_start:
            raise ValidationError("Lease end must be after lease start", field="leaseEnd")

        published = self.calendar.publish(tenant_lease_event(
            tenant_name=tenant_name,
            room_number=room_number,
            lease_start=request.lease_start,
            lease_end=request.lease_end,
            tenant_email=clean_text(request.tenant_email),
            tenant_phone=clean_text(request.tenant_phone),
            monthly_rent=money(request.monthly_rent) if request.monthly_rent is not None else "",
        ))
        if published:
            return f"Lease for {tenant_name} (Room {room_number}) added to the calendar"
        return f"Lease for {tenant_name} (Room {room_number}) recorded; calendar update pending"

    # ========== Helpers ==========

    def _transition(
        self,
        booking_id: str,
        new_status: BookingStatus,
        note: str,
        updates: Optional[Dict[str, Any]] = None,
    ) -> StoredRow:
        """Set status, apply extra field updates and append a note. Returns the row as it was before."""
        booking_id = clean_text(booking_id)
        with self.locks.booking(booking_id):
            row = self._find_row(booking_id, self.store.scan_all())
            old_status = clean_text(row.get(BookingField.BOOKING_STATUS))

            self.store.update_field(row.ref, BookingField.BOOKING_STATUS, new_status.value)
            for field_name, value in (updates or {}).items():
                self.store.update_field(row.ref, field_name, value)
            self.store.update_field(
                row.ref,
                BookingField.NOTES,
                self._append_note(row.get(BookingField.NOTES), note),
            )

        logger.booking_status_changed(booking_id, old_status, new_status.value)
        return row

    def _find_row(self, booking_id: str, rows: List[StoredRow]) -> StoredRow:
        booking_id = clean_text(booking_id)
        if not booking_id:
            raise BookingNotFound(booking_id)
        matches = [r for r in rows if clean_text(r.get(BookingField.BOOKING_ID)) == booking_id]
        if not matches:
            raise BookingNotFound(booking_id)
        if len(matches) > 1:
            logger.warning(f"Booking id {booking_id} appears on {len(matches)} rows, using the first")
        return matches[0]

    @staticmethod
    def _last_room_row(room_number: str, rows: List[StoredRow]) -> Optional[StoredRow]:
        last = None
        for row in rows:
            if clean_text(row.get(BookingField.ROOM_NUMBER)) == room_number:
                last = row
        return last

    def _note_line(self, text: str) -> str:
        return f"[{self.clock().strftime('%Y-%m-%d %H:%M')}] {text}"

    def _append_note(self, existing: Any, text: str) -> str:
        existing = clean_text(existing)
        line = self._note_line(text)
        return f"{existing}\n{line}" if existing else line


def _iso(value) -> str:
    return value.date().isoformat() if isinstance(value, datetime) else value.isoformat()
