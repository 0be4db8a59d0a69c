# Models package
from .booking import (
    BookingStatus,
    BookingSource,
    PaymentStatus,
    BookingField,
    BOOKING_HEADERS,
    TERMINAL_STATUSES,
)
from .booking_row import BookingRow
