"""Tag-scoped, token-gated Prometheus metrics exporter."""

__version__ = "0.1.0"
