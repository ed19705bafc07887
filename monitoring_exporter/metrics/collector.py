"""
Collection orchestrator: runs every producer against one fresh registry.
"""
import threading
import time
from typing import Any, Callable, Iterable, List, Optional, Sequence

from monitoring_exporter.config.logging_config import get_logger
from monitoring_exporter.metrics.registry import MetricRegistry
from monitoring_exporter.monitoring.metrics import (
    exporter_collection_duration_seconds,
    exporter_producer_failures_total,
    exporter_registered_metrics,
)

Producer = Callable[[MetricRegistry], None]


class CollectionTimeoutError(Exception):
    """Raised when a producer does not finish within the collection budget"""
    pass


def producer_name(producer: Producer) -> str:
    """Stable, human-readable identifier of a producer for logs and metrics"""
    name = getattr(producer, "__qualname__", None) or type(producer).__qualname__
    module = getattr(producer, "__module__", None)
    return f"{module}.{name}" if module else name


class MetricsCollector:
    """
    Runs producers sequentially, in the order supplied, against a fresh
    registry per pass.

    Each producer fills a private staging registry that is merged into the
    pass result only when the producer returns normally. A producer that
    raises or runs out of time therefore contributes nothing, and the other
    producers are unaffected.
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        disabled_metrics: Iterable[str] = (),
        logger: Any = None,
    ) -> None:
        """
        Initialize collector.

        Args:
            timeout_seconds: Budget for one whole pass, None for no limit
            disabled_metrics: Metric names removed from every pass result
            logger: structlog-style logger receiving failure reports
        """
        self.timeout_seconds = timeout_seconds
        self.disabled_metrics = frozenset(disabled_metrics)
        self._logger = logger if logger is not None else get_logger(__name__).bind(component="metrics_collector")

    def collect(self, producers: Sequence[Producer]) -> MetricRegistry:
        """
        Run every producer once and return the populated registry.

        Never raises because of a producer.
        """
        registry = MetricRegistry()
        start_time = time.monotonic()
        deadline = None
        if self.timeout_seconds is not None:
            deadline = start_time + self.timeout_seconds

        for producer in producers:
            name = producer_name(producer)
            try:
                staging = self._run_producer(producer, deadline)
            except CollectionTimeoutError as e:
                exporter_producer_failures_total.labels(producer=name, reason="timeout").inc()
                self._logger.warning("producer_timed_out", producer=name, error=str(e))
                # The budget is spent; later producers are skipped
                deadline = min(deadline, time.monotonic())
                continue
            except Exception as e:
                exporter_producer_failures_total.labels(producer=name, reason="error").inc()
                self._logger.error(
                    "producer_failed",
                    producer=name,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                continue
            registry.merge(staging)

        for metric_name in self.disabled_metrics:
            registry.remove(metric_name)

        elapsed = time.monotonic() - start_time
        exporter_collection_duration_seconds.observe(elapsed)
        exporter_registered_metrics.set(len(registry))

        self._logger.debug(
            "collection_completed",
            producers=len(producers),
            metrics=len(registry),
            duration_seconds=round(elapsed, 6),
        )

        return registry

    def _run_producer(self, producer: Producer, deadline: Optional[float]) -> MetricRegistry:
        """
        Run one producer into a staging registry.

        Without a deadline the producer runs inline. With one, it runs on a
        daemon thread that is joined for the remaining budget; a producer
        still running afterwards is abandoned together with its staging
        registry and does not keep the process alive at exit.
        """
        staging = MetricRegistry()

        if deadline is None:
            producer(staging)
            return staging

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise CollectionTimeoutError("Collection budget exhausted before producer started")

        errors: List[BaseException] = []

        def target() -> None:
            try:
                producer(staging)
            except BaseException as e:
                errors.append(e)

        worker = threading.Thread(
            target=target,
            name=f"producer-{producer_name(producer)}",
            daemon=True,
        )
        worker.start()
        worker.join(timeout=remaining)

        if worker.is_alive():
            raise CollectionTimeoutError(f"Producer did not finish within {remaining:.3f}s")
        if errors:
            raise errors[0]

        return staging
