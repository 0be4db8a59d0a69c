"""
Calendar Sink

Best-effort projection of bookings and tenant leases onto a calendar.
The booking record is the source of truth; the calendar may drift when the
sink is down. `publish()` never raises.

Sinks:
- WebhookCalendarSink: POSTs the event as JSON (e.g. to an Apps Script web app)
- NullCalendarSink: logs and drops the event
- RecordingCalendarSink: keeps events in memory
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import SinkUnavailable

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    GUEST = "guest"
    TENANT = "tenant"


EVENT_GLYPHS = {
    EventKind.GUEST: "🏨",
    EventKind.TENANT: "🏠",
}


@dataclass
class CalendarEventRequest:
    """An all-day event spanning [start, end)"""
    kind: EventKind
    title: str
    start: date
    end: date
    room_number: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_title(self) -> str:
        return f"{EVENT_GLYPHS[self.kind]} {self.title}"

    def description(self) -> str:
        lines = [f"{label}: {value}" for label, value in self.details.items() if value not in (None, "")]
        return "\n".join(lines)

    def location(self, facility_name: str) -> str:
        return f"{facility_name} - Room {self.room_number}"

    def to_payload(self, facility_name: str) -> Dict[str, Any]:
        end = self.end
        # All-day events need at least one day
        if end <= self.start:
            end = self.start + timedelta(days=1)
        return {
            "action": "createAllDayEvent",
            "type": self.kind.value,
            "title": self.display_title,
            "startDate": self.start.isoformat(),
            "endDate": end.isoformat(),
            "description": self.description(),
            "location": self.location(facility_name),
        }


class CalendarSink:
    """Base sink. Subclasses raise SinkUnavailable from `send` on failure."""

    def __init__(self, facility_name: str = "Guest House"):
        self.facility_name = facility_name

    def send(self, event: CalendarEventRequest) -> None:
        raise NotImplementedError

    def publish(self, event: CalendarEventRequest) -> bool:
        """
        Fire-and-forget publish. Returns True when the sink accepted the
        event and False when it failed; failures are logged, never raised.
        """
        try:
            self.send(event)
            return True
        except SinkUnavailable as e:
            logger.warning(f"Calendar event '{event.title}' not published: {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected calendar sink failure for '{event.title}': {e}")
        return False


class NullCalendarSink(CalendarSink):
    def send(self, event: CalendarEventRequest) -> None:
        logger.info(f"Calendar disabled, skipping event '{event.display_title}' ({event.start} - {event.end})")


class RecordingCalendarSink(CalendarSink):
    """Keeps every accepted event; handy for tests and dry runs."""

    def __init__(self, facility_name: str = "Guest House"):
        super().__init__(facility_name)
        self.events: List[CalendarEventRequest] = []

    def send(self, event: CalendarEventRequest) -> None:
        self.events.append(event)


class WebhookCalendarSink(CalendarSink):
    """Posts events to an HTTP endpoint that creates the calendar entry"""

    def __init__(
        self,
        url: str,
        facility_name: str = "Guest House",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(facility_name)
        self.url = url
        self.timeout = timeout
        self._client = client

    def send(self, event: CalendarEventRequest) -> None:
        payload = event.to_payload(self.facility_name)
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise SinkUnavailable(f"Calendar endpoint unreachable: {e}")

        if response.status_code >= 400:
            raise SinkUnavailable(
                f"Calendar endpoint returned HTTP {response.status_code}",
                details={"body": response.text[:200]},
            )
        logger.info(f"Calendar event created: {payload['title']} ({payload['startDate']} - {payload['endDate']})")


def guest_booking_event(
    booking_id: str,
    room_number: str,
    room_name: str,
    guest_name: str,
    check_in: date,
    check_out: date,
    guest_email: str = "",
    guest_phone: str = "",
    number_of_guests: Any = "",
) -> CalendarEventRequest:
    return CalendarEventRequest(
        kind=EventKind.GUEST,
        title=f"{guest_name} - Room {room_number}",
        start=check_in,
        end=check_out,
        room_number=room_number,
        details={
            "Guest": guest_name,
            "Booking ID": booking_id,
            "Room": f"{room_number} {room_name}".strip(),
            "Email": guest_email,
            "Phone": guest_phone,
            "Guests": number_of_guests,
        },
    )


def tenant_lease_event(
    tenant_name: str,
    room_number: str,
    lease_start: date,
    lease_end: date,
    tenant_email: str = "",
    tenant_phone: str = "",
    monthly_rent: Any = "",
) -> CalendarEventRequest:
    return CalendarEventRequest(
        kind=EventKind.TENANT,
        title=f"{tenant_name} - Room {room_number} (Lease)",
        start=lease_start,
        end=lease_end,
        room_number=room_number,
        details={
            "Tenant": tenant_name,
            "Room": room_number,
            "Email": tenant_email,
            "Phone": tenant_phone,
            "Monthly Rent": monthly_rent,
        },
    )
