"""
Prometheus metrics collection for field-validation

Counts rule evaluations and failures, rule store operations and
schema rule loader fetches.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# EVALUATION METRICS
# =======================

rule_evaluations_total = Counter(
    name="field_validation_rule_evaluations_total",
    documentation="Total number of field rule evaluations",
    labelnames=["format", "status"],  # status: passed, failed
    registry=REGISTRY,
)

validation_failures_total = Counter(
    name="field_validation_failures_total",
    documentation="Total number of validation failures reported at object save",
    labelnames=["schema_id", "format"],
    registry=REGISTRY,
)

# =======================
# STORE METRICS
# =======================

store_operations_total = Counter(
    name="field_validation_store_operations_total",
    documentation="Total number of rule store operations",
    labelnames=["operation", "status"],  # status: success, error
    registry=REGISTRY,
)

store_operation_duration_seconds = Histogram(
    name="field_validation_store_operation_duration_seconds",
    documentation="Time spent in rule store operations in seconds",
    labelnames=["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# =======================
# LOADER METRICS
# =======================

loader_fetches_total = Counter(
    name="field_validation_loader_fetches_total",
    documentation="Total number of schema rule fetches issued by the loader",
    labelnames=["status"],  # status: success, failure
    registry=REGISTRY,
)

loader_cache_hits_total = Counter(
    name="field_validation_loader_cache_hits_total",
    documentation="Total number of loader requests served from cache or an in-flight fetch",
    labelnames=["source"],  # source: cache, in_flight
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for the Prometheus text exposition format."""
    return CONTENT_TYPE_LATEST


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(store_operation_duration_seconds, operation="replace"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def record_store_operation(operation: str, success: bool) -> None:
    """Record the outcome of a rule store operation."""
    increment_counter(
        store_operations_total,
        operation=operation,
        status="success" if success else "error",
    )


def record_validation_failure(schema_id: str, rule_format: str) -> None:
    """
    Record a validation failure reported at object save.

    Args:
        schema_id: Schema the validated object belongs to
        rule_format: Format of the rule that failed
    """
    increment_counter(validation_failures_total, schema_id=schema_id, format=rule_format)
