"""Health check endpoints"""
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from provision import __version__
from provision.api.deps import get_store
from provision.store import DocumentStore

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    """
    Basic health check endpoint

    Returns 200 if service is running
    """
    return {
        "status": "healthy",
        "service": "Provision",
        "version": __version__,
        "timestamp": _now(),
    }


@router.get("/ready")
def readiness_check(store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
    """
    Readiness check - verifies the document store answers

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    start = time.time()
    reachable = store.ping()
    checks = {
        "document_store": reachable,
        "document_store_latency_ms": round((time.time() - start) * 1000, 2),
    }

    if not reachable:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks, "message": "Document store check failed"},
        )

    return {"status": "ready", "checks": checks, "timestamp": _now()}


@router.get("/live")
def liveness_check():
    """
    Liveness check - verifies service is alive

    Returns 200 if process is alive
    """
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": _now(),
    }
