# requisition/limiter.py
"""
Per-client request limiter (slowapi).
RATE_LIMIT_DEFAULT is an application-wide budget per client IP, checked by
SlowAPIMiddleware across all routes together. Routes can add their own
limits with @limiter.limit(...).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from requisition.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
