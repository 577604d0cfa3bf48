"""Monitoring and observability middleware"""
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from provision.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "provision_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "provision_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Engine metrics
access_decisions_total = Counter(
    "provision_access_decisions_total",
    "Total access decisions",
    ["check", "allowed"]  # check: access, admin
)

credential_merges_total = Counter(
    "provision_credential_merges_total",
    "Total credential merges before a write",
    ["kind", "outcome"]  # kind: user, account; outcome: ok or the error code
)

authentication_failures_total = Counter(
    "provision_authentication_failures_total",
    "Total authentication failures",
    ["reason"]  # token, password, inactive
)


def _endpoint(request: Request) -> str:
    """Route template rather than the raw path, to bound label cardinality"""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()
        method = request.method

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        response = await call_next(request)
        status = response.status_code
        endpoint = _endpoint(request)

        duration = time.time() - start_time
        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        # secret writes include a bcrypt hash
        if duration > 2.0:
            logger.warning(
                f"Slow request detected: {method} {endpoint}",
                extra={"request_id": request_id, "status": status},
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_access_decision(check: str, allowed: bool):
    """Record an access decision outcome"""
    access_decisions_total.labels(check=check, allowed=str(allowed)).inc()


def record_credential_merge(kind: str, outcome: str):
    """Record a credential merge outcome"""
    credential_merges_total.labels(kind=kind, outcome=outcome).inc()


def record_auth_failure(reason: str):
    """Record authentication failure"""
    authentication_failures_total.labels(reason=reason).inc()
