from datetime import datetime
from sqlalchemy import Column, Integer, Text, DateTime

from ..database import Base


class BookingRow(Base):
    """
    One row of the booking table, stored as a JSON object of header -> value.

    The payload is schemaless. Other subsystems may add columns and the
    engine resolves fields by header name.
    """
    __tablename__ = "booking_rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    data = Column(Text, nullable=False, default="{}")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<BookingRow {self.id}>"
