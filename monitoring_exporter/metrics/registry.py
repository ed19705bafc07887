"""
Request-scoped metric registry.
"""
from typing import Dict, Iterator, List, Optional

from monitoring_exporter.metrics.metric import Metric


class MetricRegistry:
    """
    Collection of metrics keyed by name.

    At most one metric is held per name: registering a second metric under
    an existing name replaces the first (last writer wins), and the
    replacement keeps the position of the original entry. Iteration order is
    registration order, so repeated renders of an unchanged registry are
    byte-identical.

    A registry lives for exactly one collection pass and is not safe for
    concurrent mutation.
    """

    def __init__(self) -> None:
        self._metrics: Dict[str, Metric] = {}

    def register(self, metric: Metric) -> None:
        """Insert or replace the entry for ``metric.name``"""
        self._metrics[metric.name] = metric

    # Name used by producers written against the hook-style interface
    add_metric = register

    def all(self) -> List[Metric]:
        """Return every registered metric in registration order"""
        return list(self._metrics.values())

    def get(self, name: str) -> Optional[Metric]:
        return self._metrics.get(name)

    def remove(self, name: str) -> Optional[Metric]:
        return self._metrics.pop(name, None)

    def merge(self, other: "MetricRegistry") -> None:
        """Register every metric of ``other``, in its order"""
        for metric in other.all():
            self.register(metric)

    def names(self) -> List[str]:
        return list(self._metrics)

    def __contains__(self, name: object) -> bool:
        return name in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)

    def __iter__(self) -> Iterator[Metric]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"MetricRegistry(metrics={self.names()})"
