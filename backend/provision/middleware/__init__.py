"""Middleware modules for production-ready features"""
from provision.middleware.monitoring import (
    MonitoringMiddleware,
    record_access_decision,
    record_auth_failure,
    record_credential_merge,
)
from provision.middleware.rate_limit import get_rate_limit, limiter

__all__ = [
    "MonitoringMiddleware",
    "record_access_decision",
    "record_auth_failure",
    "record_credential_merge",
    "limiter",
    "get_rate_limit",
]
