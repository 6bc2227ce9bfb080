"""
Idempotent Prometheus metric registration.

Module reloads (uvicorn --reload, repeated imports in tests) would otherwise
fail with "Duplicated timeseries" when a metric is defined a second time.
"""

from typing import TypeVar

from prometheus_client import REGISTRY, Counter, Gauge

MetricT = TypeVar("MetricT", Counter, Gauge)


def _get_or_create(
    metric_cls: type[MetricT],
    name: str,
    doc: str,
    labels: list[str] | None = None,
) -> MetricT:
    """
    Return the metric registered under `name`, creating it if needed.

    Args:
        metric_cls: Counter or Gauge.
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.
    """
    try:
        return metric_cls(name, doc, labels or [])
    except ValueError:
        # Counters register under both `name` and `name_total`
        return REGISTRY._names_to_collectors[name]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    return _get_or_create(Gauge, name, doc, labels)
