"""Catalog observability: structured search/sync logs and Prometheus updates.

Metrics tracked:
- provider status: per-source outcome, latency and result count
- search latency: end-to-end fan-out time
- sync outcome: per-item succeeded/failed counts per platform
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from observability.metrics import (
    catalog_search_results_count,
    catalog_source_duration_seconds,
    catalog_source_errors_total,
    catalog_sync_items_total,
    catalog_sync_runs_total,
)

logger = logging.getLogger("catalog.metrics")


@dataclass
class ProviderMetrics:
    """Metrics for a single source query."""
    provider_id: str
    status: str  # ok, error, timeout, skipped
    result_count: int
    total_hits: int
    latency_ms: float
    error_message: Optional[str] = None


@dataclass
class SearchMetrics:
    """Aggregated metrics for a single federated search."""
    query: str = ""
    scope: str = "all"
    returned_results: int = 0
    total_hits: int = 0
    providers_called: int = 0
    providers_succeeded: int = 0
    providers_failed: int = 0
    cached: bool = False
    total_latency_ms: float = 0.0
    provider_metrics: List[ProviderMetrics] = field(default_factory=list)

    def success_rate(self) -> float:
        if self.providers_called == 0:
            return 0.0
        return self.providers_succeeded / self.providers_called


class SearchMetricsCollector:
    """Collects per-search metrics and emits them when the search finishes."""

    @contextmanager
    def track_search(self, query: str = "", scope: str = "all") -> Iterator[SearchMetrics]:
        metrics = SearchMetrics(query=query, scope=scope)
        start_time = time.monotonic()
        try:
            yield metrics
        finally:
            metrics.total_latency_ms = (time.monotonic() - start_time) * 1000
            self._log_metrics(metrics)

    def record_provider(
        self,
        metrics: SearchMetrics,
        provider_id: str,
        status: str,
        result_count: int,
        total_hits: int,
        latency_ms: float,
        error_message: Optional[str] = None,
    ) -> None:
        metrics.provider_metrics.append(
            ProviderMetrics(
                provider_id=provider_id,
                status=status,
                result_count=result_count,
                total_hits=total_hits,
                latency_ms=latency_ms,
                error_message=error_message,
            )
        )
        if status == "skipped":
            return
        metrics.providers_called += 1
        if status == "ok":
            metrics.providers_succeeded += 1
        else:
            metrics.providers_failed += 1

    def record_results(self, metrics: SearchMetrics, returned: int, total_hits: int) -> None:
        metrics.returned_results = returned
        metrics.total_hits = total_hits

    def record_cache_hit(self, query: str, scope: str, returned: int, total_hits: int) -> None:
        """Emit a search_complete event for a response served from the cache."""
        with self.track_search(query, scope) as metrics:
            metrics.cached = True
            self.record_results(metrics, returned, total_hits)

    def _log_metrics(self, m: SearchMetrics) -> None:
        log_data = {
            "event": "search_complete",
            "query_length": len(m.query),
            "scope": m.scope,
            "cached": m.cached,
            "results": {
                "returned": m.returned_results,
                "total_hits": m.total_hits,
            },
            "providers": {
                "called": m.providers_called,
                "succeeded": m.providers_succeeded,
                "failed": m.providers_failed,
                "success_rate": round(m.success_rate(), 2),
                "details": [
                    {
                        "id": pm.provider_id,
                        "status": pm.status,
                        "results": pm.result_count,
                        "total_hits": pm.total_hits,
                        "latency_ms": round(pm.latency_ms, 1),
                    }
                    for pm in m.provider_metrics
                ],
            },
            "latency_ms": round(m.total_latency_ms, 1),
        }

        if m.providers_called > 0 and m.providers_failed == m.providers_called:
            logger.error("Search failed - all sources failed", extra=log_data)
        elif m.providers_failed > 0:
            logger.warning("Search completed with source failures", extra=log_data)
        else:
            logger.info("Search completed", extra=log_data)


_metrics_collector = SearchMetricsCollector()


def get_metrics_collector() -> SearchMetricsCollector:
    return _metrics_collector


def log_search_start(query: str, scope: str, providers: List[str]) -> None:
    logger.info(
        "Search started",
        extra={
            "event": "search_start",
            "query_length": len(query),
            "scope": scope,
            "providers_requested": providers,
        },
    )


def log_provider_result(
    provider_id: str,
    status: str,
    result_count: int,
    latency_ms: float,
    message: Optional[str] = None,
) -> None:
    """Log one source's outcome and update its Prometheus series."""
    if status != "skipped":
        catalog_source_duration_seconds.labels(source=provider_id).observe(latency_ms / 1000)
    if status == "ok":
        catalog_search_results_count.labels(source=provider_id).observe(result_count)
    elif status in ("error", "timeout"):
        catalog_source_errors_total.labels(source=provider_id, error_type=status).inc()

    extra = {
        "event": "provider_complete",
        "provider_id": provider_id,
        "status": status,
        "result_count": result_count,
        "latency_ms": round(latency_ms, 1),
    }
    if status in ("error", "timeout"):
        extra["error_message"] = message
        logger.warning(f"Source {provider_id} failed", extra=extra)
    else:
        logger.info(f"Source {provider_id} completed", extra=extra)


def log_sync_complete(
    platform: str, succeeded: int, failed: int, total: int, latency_ms: float
) -> None:
    catalog_sync_items_total.labels(platform=platform, outcome="succeeded").inc(succeeded)
    catalog_sync_items_total.labels(platform=platform, outcome="failed").inc(failed)
    catalog_sync_runs_total.labels(platform=platform, status="success").inc()

    log_data = {
        "event": "sync_complete",
        "platform": platform,
        "succeeded": succeeded,
        "failed": failed,
        "total": total,
        "latency_ms": round(latency_ms, 1),
    }
    if failed:
        logger.warning("Sync completed with item failures", extra=log_data)
    else:
        logger.info("Sync completed", extra=log_data)


def log_sync_failed(platform: str, kind: str, message: str) -> None:
    catalog_sync_runs_total.labels(platform=platform, status=kind).inc()
    logger.error(
        "Sync failed",
        extra={"event": "sync_failed", "platform": platform, "kind": kind, "error_message": message},
    )
