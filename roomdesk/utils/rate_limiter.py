"""
Rate Limiter Configuration

In-memory storage by default; point RATE_LIMIT_STORAGE_URI at a shared
backend (e.g. redis://) when running several instances.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import logging

from ..config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """Get real client IP behind a reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """Create the rate limiter from settings"""
    if not settings.rate_limit_enabled:
        logger.info("Rate limiting disabled")
    return Limiter(
        key_func=get_real_client_ip,
        default_limits=[get_rate_limit("default")],
        storage_uri=settings.rate_limit_storage_uri,
        strategy="moving-window",
        enabled=settings.rate_limit_enabled,
    )


# ================================
# RATE LIMIT CONFIGURATIONS
# ================================

RATE_LIMITS = {
    # Writes that touch the booking table
    "booking_create": "30/minute",
    "booking_transition": "60/minute",

    # Calendar publishing goes out to a third party
    "lease_calendar": "20/minute",

    # Reads
    "availability": "120/minute",
    "booking_get": "200/minute",

    "default": "100/minute",
}


def get_rate_limit(operation: str) -> str:
    """Get rate limit for a specific operation."""
    return RATE_LIMITS.get(operation, RATE_LIMITS["default"])


# Global rate limiter instance
limiter = create_limiter()
