"""
Reservation Exceptions

Error taxonomy for the reservation engine:
- ValidationError: malformed or missing input (date order, required fields)
- RoomUnavailable: conflicting booking found at creation time
- BookingNotFound: booking id lookup miss
- SinkUnavailable: calendar publish failed (always non-fatal)
- IdentifierExhausted: could not allocate an unused booking id
- RecordStoreError: the backing store failed to read or write
"""

from typing import Any, Dict, Optional


class ReservationError(Exception):
    """Base exception for all reservation engine errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ReservationError):
    """Booking input failed validation"""

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None, **kwargs):
        self.field = field
        details = kwargs.pop("details", None) or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details, **kwargs)


class RoomUnavailable(ReservationError):
    """The requested room already has an active booking in the range"""

    def __init__(self, room_number: str, conflicts: list, **kwargs):
        self.room_number = room_number
        self.conflicts = conflicts
        blocking = "; ".join(
            f"{c.guest} ({c.check_in.isoformat()} to {c.check_out.isoformat()})"
            for c in conflicts
        )
        message = (
            f"Room {room_number} is not available for the selected dates. "
            f"Conflicts with: {blocking}"
        )
        super().__init__(
            message,
            details={"room_number": room_number, "conflicts": [c.to_dict() for c in conflicts]},
            **kwargs,
        )


class BookingNotFound(ReservationError):
    """No record carries the requested booking id"""

    def __init__(self, booking_id: str, **kwargs):
        self.booking_id = booking_id
        super().__init__(
            f"Booking ID {booking_id} not found",
            details={"booking_id": booking_id},
            **kwargs,
        )


class SinkUnavailable(ReservationError):
    """Calendar sink could not accept the event"""


class IdentifierExhausted(ReservationError):
    """Every generated booking id collided with an existing one"""


class RecordStoreError(ReservationError):
    """Backing record store failed"""
