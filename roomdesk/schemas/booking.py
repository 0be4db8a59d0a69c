from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Any, List
from datetime import date
from decimal import Decimal
import re


def _strip_markup(v):
    """Strip script tags and inline event handlers from free text"""
    if isinstance(v, str):
        v = re.sub(r'<script[^>]*>.*?</script>', '', v, flags=re.IGNORECASE | re.DOTALL)
        v = re.sub(r'on\w+\s*=', '', v, flags=re.IGNORECASE)
        v = v.strip()
    return v


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AvailabilityQuery(CamelModel):
    # Kept as raw strings: a malformed date is reported in the response body
    start_date: Any = Field(None, alias="startDate")
    end_date: Any = Field(None, alias="endDate")


class BookingCreate(CamelModel):
    guest_name: str = Field("", max_length=200, alias="guestName")
    guest_email: Optional[str] = Field(None, max_length=255, alias="guestEmail")
    guest_phone: Optional[str] = Field(None, max_length=30, alias="guestPhone")
    number_of_guests: int = Field(1, ge=1, le=50, alias="numberOfGuests")
    check_in_date: date = Field(..., alias="checkInDate")
    check_out_date: date = Field(..., alias="checkOutDate")
    room_number: str = Field("", max_length=50, alias="roomNumber")
    room_name: Optional[str] = Field(None, max_length=100, alias="roomName")
    room_type: Optional[str] = Field(None, max_length=100, alias="roomType")
    daily_rate: Optional[Decimal] = Field(None, ge=0, alias="dailyRate")
    purpose_of_visit: Optional[str] = Field(None, max_length=500, alias="purposeOfVisit")
    booking_source: Optional[str] = Field(None, max_length=50, alias="bookingSource")
    payment_status: Optional[str] = Field(None, max_length=30, alias="paymentStatus")
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('room_number', mode='before')
    @classmethod
    def coerce_room_number(cls, v):
        # Forms send room numbers as numbers
        if v is None:
            return ""
        return str(v).strip()

    @field_validator('guest_name', 'purpose_of_visit', 'notes', mode='before')
    @classmethod
    def sanitize_text_fields(cls, v):
        return _strip_markup(v)


class LeaseCalendarRequest(CamelModel):
    tenant_name: str = Field("", max_length=200, alias="tenantName")
    room_number: str = Field("", max_length=50, alias="roomNumber")
    lease_start: date = Field(..., alias="leaseStart")
    lease_end: date = Field(..., alias="leaseEnd")
    tenant_email: Optional[str] = Field(None, max_length=255, alias="tenantEmail")
    tenant_phone: Optional[str] = Field(None, max_length=30, alias="tenantPhone")
    monthly_rent: Optional[Decimal] = Field(None, ge=0, alias="monthlyRent")

    @field_validator('room_number', mode='before')
    @classmethod
    def coerce_room_number(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator('tenant_name', mode='before')
    @classmethod
    def sanitize_text_fields(cls, v):
        return _strip_markup(v)


class CancelRequest(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator('reason', mode='before')
    @classmethod
    def sanitize_text_fields(cls, v):
        return _strip_markup(v)


class BookingActionResponse(CamelModel):
    success: bool = True
    booking_id: str = Field(..., alias="bookingId")
    message: str


class ConflictOut(CamelModel):
    booking_id: str = Field("", alias="bookingId")
    guest: str
    check_in: str = Field(..., alias="checkIn")
    check_out: str = Field(..., alias="checkOut")
    status: str


class RoomAvailabilityOut(CamelModel):
    room_number: str = Field(..., alias="roomNumber")
    room_name: str = Field("", alias="roomName")
    room_type: str = Field("", alias="roomType")
    daily_rate: float = Field(0.0, alias="dailyRate")
    available: bool
    status: str
    conflicts: List[ConflictOut] = []


class AvailabilityResponse(CamelModel):
    success: bool
    rooms: Optional[List[RoomAvailabilityOut]] = None
    nights: Optional[int] = None
    date_range: Optional[str] = Field(None, alias="dateRange")
    error: Optional[str] = None
