"""Rate limiting middleware using slowapi."""

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
import structlog

from monitoring_exporter.config.settings import RateLimitSettings

logger = structlog.get_logger(__name__)


RateLimitMiddleware = SlowAPIMiddleware


def build_limiter(rate_limit_settings: RateLimitSettings) -> Limiter:
    """
    Create a limiter for one application instance.

    Storage is in-memory and per limiter, so every app gets its own counters.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=list(rate_limit_settings.default_limits),
        storage_uri="memory://",
        strategy="fixed-window",
        enabled=rate_limit_settings.enabled,
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Custom rate limit exceeded handler."""
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail)
    )
    return _rate_limit_exceeded_handler(request, exc)
