"""
Validators for metric and label names of the text exposition format.
"""
import re
from typing import Iterable


METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ValidationError(ValueError):
    """Raised when validation fails"""
    pass


def validate_metric_name(name: str) -> str:
    """
    Validate a metric name.

    Args:
        name: Metric name

    Returns:
        The name unchanged

    Raises:
        ValidationError: If the name is not a valid exposition metric name
    """
    if not isinstance(name, str) or not METRIC_NAME_RE.fullmatch(name):
        raise ValidationError(f"Invalid metric name: {name!r}")
    return name


def validate_label_name(name: str) -> str:
    """Validate a label name; names starting with '__' are reserved"""
    if not isinstance(name, str) or not LABEL_NAME_RE.fullmatch(name):
        raise ValidationError(f"Invalid label name: {name!r}")
    if name.startswith("__"):
        raise ValidationError(f"Label name is reserved: {name!r}")
    return name


def validate_label_names(names: Iterable[str]) -> None:
    for name in names:
        validate_label_name(name)
