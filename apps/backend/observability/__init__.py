"""
Observability infrastructure for the Modpack Index backend.

Provides:
- Structured logging with correlation IDs
- Prometheus metrics
- Health check utilities
"""

from .logging import correlation_id_context, get_correlation_id, get_logger, log_context, setup_logging
from .metrics import (
    metrics_registry,
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
    catalog_source_duration_seconds,
    catalog_source_errors_total,
    catalog_sync_items_total,
    cache_hits_total,
    cache_misses_total,
)

__all__ = [
    "get_logger",
    "correlation_id_context",
    "get_correlation_id",
    "log_context",
    "setup_logging",
    "metrics_registry",
    "http_requests_total",
    "http_request_duration_seconds",
    "http_requests_in_progress",
    "catalog_source_duration_seconds",
    "catalog_source_errors_total",
    "catalog_sync_items_total",
    "cache_hits_total",
    "cache_misses_total",
]
