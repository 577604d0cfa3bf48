"""Rate limiting middleware for API protection"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from provision.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting

    Priority:
    1. Bearer token (authenticated user calls)
    2. IP address
    """
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        # last characters of the signature are enough to tell tokens apart
        return f"token:{authorization[-16:]}"

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Rate limit configurations for different endpoints
RATE_LIMITS = {
    # credential checks are brute-force targets
    "auth_user": "20/minute",
    "key_check": "60/minute",

    # access decisions are called on every proxied request
    "access_check": "2000/minute",
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
