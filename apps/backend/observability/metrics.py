"""
Prometheus metrics collection for the Modpack Index backend.

Provides RED metrics (Rate, Errors, Duration) for the HTTP surface plus
catalog search, sync and cache metrics.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    REGISTRY,
)

# Use the default registry
metrics_registry = REGISTRY

# HTTP metrics, labelled by route template
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=metrics_registry,
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method"],
    registry=metrics_registry,
)

# Catalog source metrics (database, modrinth, curseforge)
catalog_source_duration_seconds = Histogram(
    "catalog_source_duration_seconds",
    "Catalog source query duration in seconds",
    ["source"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=metrics_registry,
)

catalog_source_errors_total = Counter(
    "catalog_source_errors_total",
    "Total catalog source failures",
    ["source", "error_type"],  # error_type: timeout, error
    registry=metrics_registry,
)

catalog_search_results_count = Histogram(
    "catalog_search_results_count",
    "Number of entries returned by a catalog source",
    ["source"],
    buckets=[0, 1, 5, 10, 20, 50, 100],
    registry=metrics_registry,
)

# Sync metrics
catalog_sync_items_total = Counter(
    "catalog_sync_items_total",
    "Modpacks processed by reconcile runs",
    ["platform", "outcome"],  # outcome: succeeded, failed
    registry=metrics_registry,
)

catalog_sync_runs_total = Counter(
    "catalog_sync_runs_total",
    "Reconcile runs by final status",
    ["platform", "status"],  # status: success, error kind value
    registry=metrics_registry,
)

# Response cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_type"],
    registry=metrics_registry,
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_type"],
    registry=metrics_registry,
)

cache_errors_total = Counter(
    "cache_errors_total",
    "Cache operations that failed and degraded to a miss",
    ["cache_type", "operation"],
    registry=metrics_registry,
)
