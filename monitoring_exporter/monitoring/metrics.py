"""
Exporter self-instrumentation following the RED method (Rate, Errors, Duration).

These live in prometheus_client's default registry and reach scrapes through
the ``exporter_self_metrics`` producer.
"""
from prometheus_client import Counter, Gauge, Histogram

# Rate: scrapes served, by outcome (success, unauthorized)
exporter_scrapes_total = Counter(
    'exporter_scrapes_total',
    'Total number of scrape requests handled',
    ['outcome']
)

# Errors: producers whose contribution was dropped
exporter_producer_failures_total = Counter(
    'exporter_producer_failures_total',
    'Total number of producers dropped from a collection pass',
    ['producer', 'reason']
)

# Errors: metrics skipped while rendering
exporter_render_failures_total = Counter(
    'exporter_render_failures_total',
    'Total number of metrics skipped because their samples could not be produced',
    ['metric']
)

# Duration: one full collection pass
exporter_collection_duration_seconds = Histogram(
    'exporter_collection_duration_seconds',
    'Time spent running all producers for one scrape',
    [],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0)
)

# Saturation: size of the last collected registry
exporter_registered_metrics = Gauge(
    'exporter_registered_metrics',
    'Number of metrics in the most recent collection pass',
    []
)

# Secret store
secret_store_errors_total = Counter(
    'secret_store_errors_total',
    'Total secret store lookup errors',
    ['backend']
)
