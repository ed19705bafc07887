from monitoring_exporter.models.access_scope import AccessScope
from monitoring_exporter.models.sample import Sample

__all__ = [
    "AccessScope",
    "Sample",
]
