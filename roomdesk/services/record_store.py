"""
Record Store

The booking table the engine reads and writes. A store is a flat table of
rows, each an ordered mapping of header name -> value, with three
operations:

- scan_all(): every row, in table order, with an opaque reference
- append(row): add a row at the end
- update_field(ref, field, value): overwrite one cell

No store guarantees read-modify-write atomicity. Callers must not rely on
column positions; fields are resolved by header name.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import RecordStoreError

logger = logging.getLogger(__name__)


@dataclass
class StoredRow:
    """A row as read from the store plus the reference needed to update it"""
    ref: Any
    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = "") -> Any:
        value = self.values.get(name, default)
        return default if value is None else value


class RecordStore(ABC):
    """Interface every backing store implements"""

    @abstractmethod
    def scan_all(self) -> List[StoredRow]:
        """Return all rows in table order."""

    @abstractmethod
    def append(self, row: Dict[str, Any]) -> Any:
        """Append a row and return its reference."""

    @abstractmethod
    def update_field(self, ref: Any, field_name: str, value: Any) -> None:
        """Overwrite a single field of the referenced row."""

    def describe(self) -> str:
        return self.__class__.__name__


class InMemoryRecordStore(RecordStore):
    """
    Process-local store used for tests, demos and as the default backend.

    Row references are zero-based list positions. Rows are copied on the way
    in and out so callers cannot mutate stored state by accident.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self._rows: List[Dict[str, Any]] = [dict(r) for r in (rows or [])]
        self._mutex = threading.Lock()

    def scan_all(self) -> List[StoredRow]:
        with self._mutex:
            return [StoredRow(ref=i, values=copy.deepcopy(r)) for i, r in enumerate(self._rows)]

    def append(self, row: Dict[str, Any]) -> int:
        with self._mutex:
            self._rows.append(dict(row))
            return len(self._rows) - 1

    def update_field(self, ref: int, field_name: str, value: Any) -> None:
        with self._mutex:
            if not isinstance(ref, int) or ref < 0 or ref >= len(self._rows):
                raise RecordStoreError(f"Row {ref} does not exist")
            self._rows[ref][field_name] = value

    def __len__(self) -> int:
        return len(self._rows)
