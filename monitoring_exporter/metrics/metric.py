"""
Metric capability and base implementations.

Anything with a ``name`` attribute and a ``samples()`` method can be
registered as a metric. ``description`` and ``metric_type`` are optional;
when present they are rendered as the ``# HELP`` and ``# TYPE`` lines.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from monitoring_exporter.models.sample import Sample
from monitoring_exporter.utils.validators import validate_label_names, validate_metric_name


class MetricType(str, Enum):
    """Metric types of the text exposition format"""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    SUMMARY = "summary"
    UNTYPED = "untyped"


class InvalidLabelsError(ValueError):
    """Raised when a sample does not carry the label names its metric declares"""
    pass


@runtime_checkable
class Metric(Protocol):
    """Uniform contract every producer-supplied metric satisfies"""

    @property
    def name(self) -> str:
        ...

    def samples(self) -> Sequence[Sample]:
        ...


class BaseMetric(ABC):
    """
    Base class for metrics.

    Subclasses implement ``calculate``, which may return a sample, a number,
    or any iterable of those; numbers become unlabeled samples. Anything else
    makes ``samples()`` raise ``TypeError``. Values are recomputed on every
    ``samples()`` call.

    Setting ``label_names`` makes the metric strict: every sample must carry
    exactly those label names, otherwise ``samples()`` raises
    ``InvalidLabelsError``.
    """

    metric_type: Optional[MetricType] = None
    label_names: Optional[Tuple[str, ...]] = None

    def __init__(
        self,
        name: str,
        description: Optional[str] = None,
        metric_type: Optional[MetricType] = None,
        label_names: Optional[Iterable[str]] = None,
    ) -> None:
        self._name = validate_metric_name(name)
        self.description = description
        if metric_type is not None:
            self.metric_type = MetricType(metric_type)
        if label_names is not None:
            self.label_names = tuple(label_names)
        if self.label_names is not None:
            validate_label_names(self.label_names)

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def calculate(self) -> Union[float, Sample, Iterable[Union[float, Sample]]]:
        """Produce the current sample(s)"""
        raise NotImplementedError("Subclass must implement calculate()")

    def validate_sample(self, sample: Union[float, Sample]) -> Sample:
        if isinstance(sample, (int, float)) and not isinstance(sample, bool):
            sample = Sample(value=sample)
        elif not isinstance(sample, Sample):
            raise TypeError(f"Metric {self.name} produced {type(sample).__name__}, expected Sample or number")
        if self.label_names is None:
            return sample
        if set(sample.labels) != set(self.label_names):
            raise InvalidLabelsError(
                f"Metric {self.name} expects labels {sorted(self.label_names)}, "
                f"got {sorted(sample.labels)}"
            )
        return sample

    def samples(self) -> Sequence[Sample]:
        result = self.calculate()
        if isinstance(result, (Sample, int, float)):
            result = [result]
        return [self.validate_sample(sample) for sample in result]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class SimpleMetric(BaseMetric):
    """Metric holding fixed samples, set at construction or via ``set``."""

    def __init__(
        self,
        name: str,
        value: Union[float, Sample, Iterable[Sample], None] = None,
        description: Optional[str] = None,
        metric_type: Optional[MetricType] = None,
        label_names: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(name, description, metric_type, label_names)
        self._samples: Tuple[Sample, ...] = ()
        if value is not None:
            self.set(value)

    def set(self, value: Union[float, Sample, Iterable[Sample]]) -> None:
        if isinstance(value, Sample):
            self._samples = (value,)
        elif isinstance(value, (int, float)):
            self._samples = (Sample(value=value),)
        else:
            self._samples = tuple(value)

    def calculate(self) -> Iterable[Sample]:
        return self._samples


class CallbackMetric(BaseMetric):
    """Live metric whose samples come from a callback evaluated at render time."""

    def __init__(
        self,
        name: str,
        callback: Callable[[], Union[float, Sample, Iterable[Sample]]],
        description: Optional[str] = None,
        metric_type: Optional[MetricType] = MetricType.GAUGE,
        label_names: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(name, description, metric_type, label_names)
        self._callback = callback

    def calculate(self) -> Union[float, Sample, Iterable[Union[float, Sample]]]:
        return self._callback()
