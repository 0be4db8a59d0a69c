from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import Any, Dict, Optional
import logging

from ..dependencies import get_booking_service
from ..exceptions import (
    BookingNotFound, IdentifierExhausted, RecordStoreError, RoomUnavailable, ValidationError
)
from ..schemas.booking import (
    AvailabilityQuery, AvailabilityResponse, BookingActionResponse, BookingCreate,
    CancelRequest, LeaseCalendarRequest
)
from ..services.booking_service import BookingService
from ..utils.rate_limiter import get_rate_limit, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"])


def _raise_http(e: Exception):
    """Map engine errors to HTTP errors, keeping the original message for display"""
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, RoomUnavailable):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    if isinstance(e, BookingNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, (RecordStoreError, IdentifierExhausted)):
        logger.error(f"Booking store failure: {e.message}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    raise e


@router.post("/availability", response_model=AvailabilityResponse, response_model_exclude_none=True)
@limiter.limit(get_rate_limit("availability"))
def check_availability(
    request: Request,
    query: AvailabilityQuery,
    service: BookingService = Depends(get_booking_service)
):
    """Availability of every known room for [startDate, endDate). Never fails with an HTTP error."""
    return service.availability(query.start_date, query.end_date)


@router.post("/bookings", response_model=BookingActionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("booking_create"))
def create_booking(
    request: Request,
    booking_data: BookingCreate,
    service: BookingService = Depends(get_booking_service)
):
    """
    Create a reservation.

    - 400 when dates are out of order or guest name / room number is missing
    - 409 when another active booking overlaps the requested range
    """
    try:
        confirmation = service.create(booking_data)
    except (ValidationError, RoomUnavailable, RecordStoreError, IdentifierExhausted) as e:
        _raise_http(e)
    return BookingActionResponse(booking_id=confirmation.booking_id, message=confirmation.message)


@router.get("/bookings/{booking_id}")
@limiter.limit(get_rate_limit("booking_get"))
def get_booking(
    request: Request,
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
) -> Dict[str, Any]:
    """Stored record for a booking, keyed by column header"""
    try:
        return service.get_booking(booking_id)
    except (BookingNotFound, RecordStoreError) as e:
        _raise_http(e)


@router.post("/bookings/{booking_id}/check-in", response_model=BookingActionResponse)
@limiter.limit(get_rate_limit("booking_transition"))
def check_in(
    request: Request,
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
):
    try:
        message = service.check_in(booking_id)
    except (BookingNotFound, RecordStoreError) as e:
        _raise_http(e)
    return BookingActionResponse(booking_id=booking_id, message=message)


@router.post("/bookings/{booking_id}/check-out", response_model=BookingActionResponse)
@limiter.limit(get_rate_limit("booking_transition"))
def check_out(
    request: Request,
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
):
    try:
        message = service.check_out(booking_id)
    except (BookingNotFound, RecordStoreError) as e:
        _raise_http(e)
    return BookingActionResponse(booking_id=booking_id, message=message)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingActionResponse)
@limiter.limit(get_rate_limit("booking_transition"))
def cancel_booking(
    request: Request,
    booking_id: str,
    cancel_data: Optional[CancelRequest] = None,
    service: BookingService = Depends(get_booking_service)
):
    reason = cancel_data.reason if cancel_data else None
    try:
        message = service.cancel(booking_id, reason=reason)
    except (BookingNotFound, RecordStoreError) as e:
        _raise_http(e)
    return BookingActionResponse(booking_id=booking_id, message=message)


@router.post("/leases/calendar")
@limiter.limit(get_rate_limit("lease_calendar"))
def publish_lease(
    request: Request,
    lease_data: LeaseCalendarRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Put a tenant lease on the facility calendar (best-effort)"""
    try:
        message = service.record_tenant_lease(lease_data)
    except ValidationError as e:
        _raise_http(e)
    return {"success": True, "message": message}
