"""
Built-in producers and the static producer registration table.

A producer is any callable taking a ``MetricRegistry`` and registering zero
or more metrics into it. ``DEFAULT_PRODUCERS`` is the table the application
serves unless it is built with an explicit list.
"""
import platform
from typing import Iterator, List, Optional

from prometheus_client import REGISTRY, CollectorRegistry

from monitoring_exporter import __version__
from monitoring_exporter.config.logging_config import get_logger
from monitoring_exporter.metrics.collector import Producer
from monitoring_exporter.metrics.metric import MetricType, SimpleMetric
from monitoring_exporter.metrics.registry import MetricRegistry
from monitoring_exporter.models.sample import Sample
from monitoring_exporter.utils.validators import ValidationError

logger = get_logger(__name__)

# prometheus_client family types mapped onto text format 0.0.4 types
_FAMILY_TYPES = {
    "counter": MetricType.COUNTER,
    "gauge": MetricType.GAUGE,
    "histogram": MetricType.HISTOGRAM,
    "summary": MetricType.SUMMARY,
    "info": MetricType.GAUGE,
    "stateset": MetricType.GAUGE,
    "gaugehistogram": MetricType.HISTOGRAM,
    "unknown": MetricType.UNTYPED,
}


def exporter_up_producer(registry: MetricRegistry) -> None:
    registry.register(SimpleMetric(
        "exporter_up",
        1.0,
        description="Whether the exporter is serving scrapes",
        metric_type=MetricType.GAUGE,
    ))


def build_info_producer(registry: MetricRegistry) -> None:
    registry.register(SimpleMetric(
        "exporter_build_info",
        Sample(value=1.0, labels={
            "version": __version__,
            "python_version": platform.python_version(),
        }),
        description="Exporter build information",
        metric_type=MetricType.GAUGE,
        label_names=("version", "python_version"),
    ))


class PrometheusClientProducer:
    """
    Bridges a prometheus_client ``CollectorRegistry`` into the scrape registry.

    Family names are adjusted the way prometheus_client's own text exposition
    does it: counters gain ``_total``, info metrics gain ``_info``. ``_created``
    series are dropped.
    """

    def __init__(self, collector_registry: Optional[CollectorRegistry] = None) -> None:
        self.collector_registry = collector_registry if collector_registry is not None else REGISTRY

    def __call__(self, registry: MetricRegistry) -> None:
        for metric in self.metrics():
            registry.register(metric)

    def metrics(self) -> Iterator[SimpleMetric]:
        for family in self.collector_registry.collect():
            name = family.name
            if family.type == "counter":
                name = f"{name}_total"
            elif family.type == "info":
                name = f"{name}_info"

            samples: List[Sample] = []
            for s in family.samples:
                if s.name == f"{family.name}_created" or not s.name.startswith(name):
                    continue
                samples.append(Sample(
                    value=s.value,
                    labels=dict(s.labels),
                    timestamp=float(s.timestamp) if s.timestamp is not None else None,
                    suffix=s.name[len(name):],
                ))

            try:
                metric = SimpleMetric(
                    name,
                    samples,
                    description=family.documentation,
                    metric_type=_FAMILY_TYPES.get(family.type, MetricType.UNTYPED),
                )
            except ValidationError as e:
                logger.debug("collector_family_skipped", family=family.name, error=str(e))
                continue

            yield metric


exporter_self_metrics = PrometheusClientProducer()

DEFAULT_PRODUCERS: List[Producer] = [
    exporter_up_producer,
    build_info_producer,
    exporter_self_metrics,
]
