from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from monitoring_exporter.utils.validators import validate_label_names


class Sample(BaseModel):
    """
    One measured data point of a metric.

    Samples are values: metrics produce fresh ones on every render, nothing
    holds on to them between scrapes.
    """

    model_config = ConfigDict(frozen=True)

    value: float = Field(
        ...,
        description="Observed value; NaN and +/-Inf are allowed",
    )

    labels: Dict[str, str] = Field(
        default_factory=dict,
        description="Label name to label value; rendered sorted by name",
    )

    timestamp: Optional[float] = Field(
        default=None,
        description="Seconds since Unix epoch; omitted from the exposition when unset",
    )

    suffix: str = Field(
        default="",
        description="Appended to the metric name on the sample line, e.g. '_bucket' or '_sum'",
    )

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate that every label name is usable in the exposition format."""
        validate_label_names(v.keys())
        return v

    @property
    def timestamp_ms(self) -> Optional[int]:
        """Timestamp in integer milliseconds, as the text format expects."""
        if self.timestamp is None:
            return None
        return int(self.timestamp * 1000)
