"""
SQL Record Store

Keeps booking rows in the `booking_rows` table as JSON objects. Row
references are primary keys. Updates lock the row on PostgreSQL so two
writers touching the same booking do not lose each other's cells.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import RecordStoreError
from ..models.booking_row import BookingRow
from ..utils.db_helpers import acquire_row_lock
from .record_store import RecordStore, StoredRow

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    """Record store backed by any SQLAlchemy database"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def scan_all(self) -> List[StoredRow]:
        db = self.session_factory()
        try:
            rows = db.query(BookingRow).order_by(BookingRow.id).all()
            return [StoredRow(ref=r.id, values=self._decode(r)) for r in rows]
        except SQLAlchemyError as e:
            logger.error(f"Failed to scan booking rows: {e}")
            raise RecordStoreError(f"Could not read booking rows: {e}")
        finally:
            db.close()

    def append(self, row: Dict[str, Any]) -> int:
        db = self.session_factory()
        try:
            record = BookingRow(data=json.dumps(row, ensure_ascii=False, default=str))
            db.add(record)
            db.commit()
            db.refresh(record)
            return record.id
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to append booking row: {e}")
            raise RecordStoreError(f"Could not append booking row: {e}")
        finally:
            db.close()

    def update_field(self, ref: int, field_name: str, value: Any) -> None:
        db = self.session_factory()
        try:
            record = acquire_row_lock(db, BookingRow, BookingRow.id == ref)
            if record is None:
                raise RecordStoreError(f"Row {ref} does not exist")
            data = self._decode(record)
            data[field_name] = value
            record.data = json.dumps(data, ensure_ascii=False, default=str)
            record.updated_at = datetime.utcnow()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update row {ref}.{field_name}: {e}")
            raise RecordStoreError(f"Could not update booking row {ref}: {e}")
        finally:
            db.close()

    @staticmethod
    def _decode(record: BookingRow) -> Dict[str, Any]:
        try:
            data = json.loads(record.data or "{}")
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Row {record.id} holds invalid JSON, treating as empty")
            return {}
        return data if isinstance(data, dict) else {}
