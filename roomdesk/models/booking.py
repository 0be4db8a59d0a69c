import enum


class BookingStatus(str, enum.Enum):
    RESERVED = "Reserved"
    CHECKED_IN = "Checked-In"
    CHECKED_OUT = "Checked-Out"
    CANCELLED = "Cancelled"


# Excluded from conflict checks, kept for history
TERMINAL_STATUSES = frozenset({BookingStatus.CHECKED_OUT.value, BookingStatus.CANCELLED.value})


class BookingSource(str, enum.Enum):
    """Where the booking came from (informational only)"""
    DIRECT = "Direct"
    ONLINE = "Online"
    PHONE = "Phone"
    WALK_IN = "Walk-In"
    REFERRAL = "Referral"


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"
    REFUNDED = "Refunded"


class BookingField:
    """Header names of the booking table. Fields are always looked up by these names."""
    BOOKING_ID = "Booking ID"
    ROOM_NUMBER = "Room Number"
    ROOM_NAME = "Room Name"
    ROOM_TYPE = "Room Type"
    DAILY_RATE = "Daily Rate"
    CHECK_IN_DATE = "Check-In Date"
    CHECK_OUT_DATE = "Check-Out Date"
    NIGHTS = "Nights"
    NUMBER_OF_GUESTS = "Number of Guests"
    CURRENT_GUEST = "Current Guest"
    GUEST_EMAIL = "Guest Email"
    GUEST_PHONE = "Guest Phone"
    PURPOSE_OF_VISIT = "Purpose of Visit"
    TOTAL_AMOUNT = "Total Amount"
    PAYMENT_STATUS = "Payment Status"
    BOOKING_STATUS = "Booking Status"
    SOURCE = "Source"
    NOTES = "Notes"


# Column order used when a table has to be created from scratch
BOOKING_HEADERS = [
    BookingField.BOOKING_ID,
    BookingField.ROOM_NUMBER,
    BookingField.ROOM_NAME,
    BookingField.ROOM_TYPE,
    BookingField.DAILY_RATE,
    BookingField.CHECK_IN_DATE,
    BookingField.CHECK_OUT_DATE,
    BookingField.NIGHTS,
    BookingField.NUMBER_OF_GUESTS,
    BookingField.CURRENT_GUEST,
    BookingField.GUEST_EMAIL,
    BookingField.GUEST_PHONE,
    BookingField.PURPOSE_OF_VISIT,
    BookingField.TOTAL_AMOUNT,
    BookingField.PAYMENT_STATUS,
    BookingField.BOOKING_STATUS,
    BookingField.SOURCE,
    BookingField.NOTES,
]
