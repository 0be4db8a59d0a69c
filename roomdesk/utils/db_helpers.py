"""
Row locking for the SQL record store.

PostgreSQL gets SELECT ... FOR UPDATE; SQLite has no row locks and relies on
its database-level write lock.
"""

import logging
from typing import Optional, Type, TypeVar

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT')


def dialect_name(db: Session) -> str:
    bind = getattr(db, 'bind', None)
    dialect = getattr(bind, 'dialect', None)
    return getattr(dialect, 'name', '') or ''


def is_postgres(db: Session) -> bool:
    return dialect_name(db) == 'postgresql'


def acquire_row_lock(db: Session, model: Type[ModelT], filter_condition) -> Optional[ModelT]:
    """
    Load the first row matching `filter_condition`, locked for the rest of
    the transaction where the dialect supports it. Returns None on a miss.
    """
    query = db.query(model).filter(filter_condition)
    if is_postgres(db):
        query = query.with_for_update()
    return query.first()
