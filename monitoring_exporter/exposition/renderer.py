"""
Prometheus text exposition format (version 0.0.4) renderer.

See https://prometheus.io/docs/instrumenting/exposition_formats/
"""
from typing import Any, List, Optional

from prometheus_client.utils import floatToGoString

from monitoring_exporter.config.logging_config import get_logger
from monitoring_exporter.metrics.metric import Metric
from monitoring_exporter.metrics.registry import MetricRegistry
from monitoring_exporter.models.sample import Sample
from monitoring_exporter.monitoring.metrics import exporter_render_failures_total

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def escape_help(text: str) -> str:
    return text.replace("\\", r"\\").replace("\n", r"\n")


def escape_label_value(value: str) -> str:
    return value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r'\"')


def format_sample_line(metric_name: str, sample: Sample) -> str:
    """
    Format one sample as ``name{k1="v1",k2="v2"} value [timestamp_ms]``.

    Labels are sorted by name; the braces are omitted when there are none.
    """
    labelstr = ""
    if sample.labels:
        labelstr = "{" + ",".join(
            f'{k}="{escape_label_value(v)}"' for k, v in sorted(sample.labels.items())
        ) + "}"

    timestamp = ""
    if sample.timestamp_ms is not None:
        timestamp = f" {sample.timestamp_ms:d}"

    return f"{metric_name}{sample.suffix}{labelstr} {floatToGoString(sample.value)}{timestamp}\n"


class ExpositionRenderer:
    """
    Serializes a registry into the text exposition format.

    Rendering has no effect on the registry: an unchanged registry renders to
    byte-identical output, and an empty one renders to an empty string.
    """

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger if logger is not None else get_logger(__name__).bind(component="exposition_renderer")

    def render(self, registry: MetricRegistry) -> str:
        output: List[str] = []
        for metric in registry.all():
            block = self.render_metric(metric)
            if block is not None:
                output.append(block)
        return "".join(output)

    def render_metric(self, metric: Metric) -> Optional[str]:
        """
        Render one metric block: optional HELP and TYPE lines, then one line per sample.

        Returns None when the metric fails to produce or format its samples,
        so a broken metric never leaves a partial block in the output.
        """
        name = metric.name
        try:
            return self._format_block(metric)
        except Exception as e:
            exporter_render_failures_total.labels(metric=name).inc()
            self._logger.error(
                "metric_render_failed",
                metric=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _format_block(self, metric: Metric) -> str:
        name = metric.name
        samples = list(metric.samples())

        lines: List[str] = []
        description = getattr(metric, "description", None)
        if description:
            lines.append(f"# HELP {name} {escape_help(description)}\n")
        metric_type = getattr(metric, "metric_type", None)
        if metric_type is not None:
            lines.append(f"# TYPE {name} {getattr(metric_type, 'value', metric_type)}\n")

        for sample in samples:
            lines.append(format_sample_line(name, sample))

        return "".join(lines)
