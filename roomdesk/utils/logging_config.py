"""
Structured Logging

- JSON lines (production) or plain text (development)
- Request id carried through a context variable and stamped on every record
- Reservation events logged with booking/room context under "context"
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

TEXT_FORMAT = '%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s'

NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "gspread", "urllib3")


class RequestIdFilter(logging.Filter):
    """Copies the current request id onto the record so any formatter can use it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or '-'
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = getattr(record, 'request_id', '') or request_id_var.get()
        if request_id and request_id != '-':
            entry["request_id"] = request_id

        context = getattr(record, 'context', None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ReservationLogger(logging.LoggerAdapter):
    """Adapter with helpers for the reservation events worth searching for."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(self.extra or {})
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra
        return msg, kwargs

    def event(self, level: int, msg: str, **context):
        self.log(level, msg, extra={'context': context})

    def booking_created(self, booking_id: str, room_number: str, guest_name: str, total_amount: float):
        self.event(
            logging.INFO,
            f"Booking {booking_id} created: {guest_name} in room {room_number}",
            booking_id=booking_id,
            room_number=room_number,
            total_amount=total_amount,
        )

    def booking_status_changed(self, booking_id: str, old_status: str, new_status: str):
        self.event(
            logging.INFO,
            f"Booking {booking_id}: {old_status or '(blank)'} -> {new_status}",
            booking_id=booking_id,
            old_status=old_status,
            new_status=new_status,
        )

    def booking_rejected(self, room_number: str, reason: str):
        self.event(
            logging.WARNING,
            f"Booking rejected for room {room_number}",
            room_number=room_number,
            reason=reason,
        )


def setup_logging(level: str = "INFO", json_format: bool = True, include_uvicorn: bool = True) -> None:
    """
    Configure the root logger once at startup.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines instead of plain text
        include_uvicorn: Route uvicorn's loggers through the same handler
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    if include_uvicorn:
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uvicorn_logger = logging.getLogger(name)
            uvicorn_logger.handlers = [handler]
            uvicorn_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **bound: Any) -> ReservationLogger:
    """Reservation logger for a module, optionally with fields bound to every record."""
    return ReservationLogger(logging.getLogger(name), {'context': bound} if bound else {})


def set_request_context(request_id: Optional[str]):
    request_id_var.set(request_id or '')


def clear_request_context():
    request_id_var.set('')
