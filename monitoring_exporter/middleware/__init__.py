"""Middleware modules for FastAPI."""

from monitoring_exporter.middleware.request_id import RequestIDMiddleware
from monitoring_exporter.middleware.rate_limit import RateLimitMiddleware, build_limiter, rate_limit_handler

__all__ = ["RequestIDMiddleware", "RateLimitMiddleware", "build_limiter", "rate_limit_handler"]
