"""
Booking identifiers: prefix + last 6 digits of epoch milliseconds + 2 random digits.

The space is small (truncated timestamp, 100 suffixes), so allocation checks
the candidate against ids already in the table and retries on a clash.
"""

import logging
import random
import time
from typing import Callable, Container, Optional

from ..exceptions import IdentifierExhausted

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "BK"


def new_booking_id(
    prefix: str = DEFAULT_PREFIX,
    clock: Callable[[], float] = time.time,
    rng: Optional[random.Random] = None,
) -> str:
    millis = int(clock() * 1000)
    suffix = (rng or random).randint(0, 99)
    return f"{prefix}{str(millis)[-6:]}{suffix:02d}"


def allocate_booking_id(
    existing_ids: Container[str],
    prefix: str = DEFAULT_PREFIX,
    max_attempts: int = 5,
    generator: Callable[[str], str] = new_booking_id,
) -> str:
    """Generate ids until one is not in `existing_ids`."""
    for attempt in range(1, max_attempts + 1):
        candidate = generator(prefix)
        if candidate not in existing_ids:
            return candidate
        logger.warning(f"Booking id {candidate} already in use (attempt {attempt}/{max_attempts})")
    raise IdentifierExhausted(
        f"Could not allocate an unused booking id after {max_attempts} attempts"
    )
