"""FastAPI application serving tag-scoped Prometheus scrapes."""

from typing import Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import structlog

from monitoring_exporter import __version__
from monitoring_exporter.api.routes import health, metrics
from monitoring_exporter.auth.access_gate import AccessGate
from monitoring_exporter.config.logging_config import configure_logging
from monitoring_exporter.config.settings import Settings
from monitoring_exporter.exposition.renderer import ExpositionRenderer
from monitoring_exporter.metrics.collector import MetricsCollector, Producer
from monitoring_exporter.metrics.producers import DEFAULT_PRODUCERS
from monitoring_exporter.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    build_limiter,
    rate_limit_handler,
)
from monitoring_exporter.monitoring.health_check import HealthCheckService
from monitoring_exporter.repositories.base import AbstractSecretStore
from monitoring_exporter.repositories.static_secret_store import StaticSecretStore
from monitoring_exporter.repositories.vault_repository import VaultSecretStore

logger = structlog.get_logger(__name__)


def build_secret_store(settings: Settings) -> AbstractSecretStore:
    """Create the secret store selected by AUTH_BACKEND."""
    backend = settings.auth.backend.lower()
    if backend == "static":
        return StaticSecretStore(settings.auth.tag_tokens)
    if backend == "vault":
        return VaultSecretStore(settings=settings)
    raise ValueError(f"Unknown secret store backend: {settings.auth.backend}")


def create_app(
    settings: Optional[Settings] = None,
    producers: Optional[Sequence[Producer]] = None,
    secret_store: Optional[AbstractSecretStore] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings, read from the environment if omitted
        producers: Producers run on every scrape, DEFAULT_PRODUCERS if omitted
        secret_store: Scrape token source, built from settings if omitted
    """
    settings = settings or Settings()
    configure_logging(settings.logging)

    producers = list(DEFAULT_PRODUCERS if producers is None else producers)
    secret_store = secret_store or build_secret_store(settings)

    app = FastAPI(
        title="Monitoring Exporter",
        description="Tag-scoped, token-gated Prometheus metrics exposition",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.exposition_endpoint = metrics.ExpositionEndpoint(
        access_gate=AccessGate(secret_store),
        collector=MetricsCollector(
            timeout_seconds=settings.collection.timeout_seconds,
            disabled_metrics=settings.collection.disabled_metrics,
        ),
        renderer=ExpositionRenderer(),
        producers=producers,
        allow_bearer_header=settings.auth.allow_bearer_header,
    )
    app.state.health_service = HealthCheckService(secret_store=secret_store, producers=producers)

    # Rate limiting
    app.state.limiter = build_limiter(settings.rate_limit)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_middleware(RateLimitMiddleware)

    # Exception handlers
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "Internal server error",
                "detail": str(exc) if settings.environment == "development" else None,
            },
        )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests; the query string is left out because it carries the token."""
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )
        response = await call_next(request)
        logger.info(
            "http_response",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response

    # Added last so it wraps the logging middleware and the request ID is bound first
    app.add_middleware(RequestIDMiddleware)

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["metrics"])

    @app.on_event("startup")
    async def startup_event():
        """Run on application startup."""
        logger.info(
            "exporter_starting",
            version=__version__,
            secret_store=secret_store.backend,
            producers=len(producers),
        )
        try:
            secret_store.connect()
        except Exception as e:
            # Scrapes fail closed until the store is reachable
            logger.error("secret_store_connect_failed", error=str(e), exc_info=True)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Run on application shutdown."""
        logger.info("exporter_shutting_down")
        secret_store.close()

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "monitoring_exporter.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )
