"""
Wiring of the record store, calendar sink and booking service from settings.

Routers depend on `get_booking_service`; tests override it through
`app.dependency_overrides`.
"""

import logging
from functools import lru_cache

from .config import settings
from .services.booking_service import BookingService
from .services.calendar_sink import CalendarSink, NullCalendarSink, WebhookCalendarSink
from .services.record_store import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_record_store() -> RecordStore:
    """Build the configured record store once per process"""
    if settings.record_store == "sql":
        from .database import SessionLocal
        from .services.sql_record_store import SqlRecordStore
        store = SqlRecordStore(SessionLocal)
    elif settings.record_store == "sheets":
        from .services.sheets_record_store import GoogleSheetsRecordStore
        store = GoogleSheetsRecordStore.from_settings(settings)
    else:
        store = InMemoryRecordStore()
    logger.info(f"Record store: {store.describe()}")
    return store


@lru_cache()
def get_calendar_sink() -> CalendarSink:
    if settings.calendar_webhook_url:
        return WebhookCalendarSink(
            settings.calendar_webhook_url,
            facility_name=settings.facility_name,
            timeout=settings.calendar_timeout_seconds,
        )
    logger.info("CALENDAR_WEBHOOK_URL not set, calendar events will only be logged")
    return NullCalendarSink(facility_name=settings.facility_name)


@lru_cache()
def get_booking_service() -> BookingService:
    return BookingService.from_settings(settings, get_record_store(), get_calendar_sink())
