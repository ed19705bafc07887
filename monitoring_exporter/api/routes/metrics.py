"""Tag-scoped Prometheus metrics endpoint."""

from typing import Optional, Sequence

from fastapi import APIRouter, Depends, Header, Path, Query, Request, Response, status
from starlette.concurrency import run_in_threadpool
import structlog

from monitoring_exporter.auth.access_gate import AccessGate, UnauthorizedError
from monitoring_exporter.exposition.renderer import CONTENT_TYPE, ExpositionRenderer
from monitoring_exporter.metrics.collector import MetricsCollector, Producer
from monitoring_exporter.monitoring.metrics import exporter_scrapes_total

logger = structlog.get_logger(__name__)

router = APIRouter()

TAG_PATTERN = r"^[A-Za-z0-9]+$"


class ExpositionEndpoint:
    """
    Composes access gate, collector and renderer into one scrape response.

    Authorization runs first; a denied request never triggers a collection
    pass. Every other failure degrades to partial or empty output.
    """

    def __init__(
        self,
        access_gate: AccessGate,
        collector: MetricsCollector,
        renderer: ExpositionRenderer,
        producers: Sequence[Producer],
        allow_bearer_header: bool = True,
    ) -> None:
        self.access_gate = access_gate
        self.collector = collector
        self.renderer = renderer
        self.producers = list(producers)
        self.allow_bearer_header = allow_bearer_header

    def handle(
        self,
        tag: str,
        token: Optional[str],
        producers: Optional[Sequence[Producer]] = None,
    ) -> Response:
        try:
            scope = self.access_gate.authorize(tag, token)
        except UnauthorizedError:
            exporter_scrapes_total.labels(outcome="unauthorized").inc()
            return Response(
                content="",
                status_code=status.HTTP_401_UNAUTHORIZED,
                media_type="text/plain",
                headers={"WWW-Authenticate": "Bearer"},
            )

        registry = self.collector.collect(self.producers if producers is None else producers)
        body = self.renderer.render(registry)

        exporter_scrapes_total.labels(outcome="success").inc()
        logger.info("scrape_served", tag=scope.tag, metrics=len(registry), bytes=len(body))

        return Response(content=body, media_type=CONTENT_TYPE)

    def resolve_token(self, query_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
        """Prefer the query parameter; fall back to an 'Authorization: Bearer' header."""
        if query_token is not None:
            return query_token
        if not self.allow_bearer_header or not authorization:
            return None
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() != "bearer":
            return None
        return credentials.strip() or None


def get_exposition_endpoint(request: Request) -> ExpositionEndpoint:
    """Endpoint instance built by the application factory."""
    return request.app.state.exposition_endpoint


@router.get("/{tag}/metrics")
async def metrics(
    tag: str = Path(..., pattern=TAG_PATTERN, description="Authorization scope"),
    token: Optional[str] = Query(default=None, description="Scrape token for the tag"),
    authorization: Optional[str] = Header(default=None),
    endpoint: ExpositionEndpoint = Depends(get_exposition_endpoint),
) -> Response:
    """
    Prometheus metrics endpoint.

    Returns every collected metric in text format 0.0.4 when the token is
    valid for the tag, 401 with an empty body otherwise.
    """
    logger.debug("metrics_requested", tag=tag)

    presented = endpoint.resolve_token(token, authorization)

    # Producers are plain synchronous callables
    return await run_in_threadpool(endpoint.handle, tag, presented)
