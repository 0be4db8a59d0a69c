"""
Health Check Endpoints

- /health/live - Liveness check (is process running)
- /health/ready - Readiness check (can the record store be scanned)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import time

from ..config import settings
from ..dependencies import get_record_store
from ..exceptions import RecordStoreError
from ..services.record_store import RecordStore

router = APIRouter(prefix="/health", tags=["Health"])


def get_store_health(store: RecordStore) -> dict:
    """Scan the record store and report latency and row count"""
    try:
        start = time.time()
        rows = store.scan_all()
        latency_ms = (time.time() - start) * 1000
        return {
            "status": "up",
            "latency_ms": round(latency_ms, 2),
            "rows": len(rows),
            "type": store.describe(),
        }
    except RecordStoreError as e:
        return {"status": "down", "error": e.message[:100]}


@router.get("/live")
def liveness():
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def readiness(store: RecordStore = Depends(get_record_store)):
    store_health = get_store_health(store)
    ready = store_health["status"] == "up"
    body = {
        "status": "ready" if ready else "not_ready",
        "environment": settings.environment,
        "record_store": store_health,
        "calendar": "webhook" if settings.calendar_webhook_url else "disabled",
    }
    return JSONResponse(status_code=200 if ready else 503, content=body)
