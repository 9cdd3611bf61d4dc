"""Tests for catalog search/sync metrics and structured logging helpers."""

import logging

from catalog.metrics import (
    ProviderMetrics,
    SearchMetrics,
    SearchMetricsCollector,
    log_provider_result,
    log_sync_complete,
    log_sync_failed,
)
from observability.logging import (
    ContextFilter,
    SensitiveDataFilter,
    correlation_id_context,
    get_correlation_id,
    log_context,
)
from observability.metrics import metrics_registry


def _sample(name, labels):
    return metrics_registry.get_sample_value(name, labels) or 0.0


class TestSearchMetrics:
    def test_success_rate(self):
        assert SearchMetrics(providers_called=4, providers_succeeded=2).success_rate() == 0.5
        assert SearchMetrics().success_rate() == 0.0

    def test_record_provider_ignores_skipped_sources_in_counts(self):
        collector = SearchMetricsCollector()
        metrics = SearchMetrics()

        collector.record_provider(metrics, "database", "ok", 4, 4, 12.0)
        collector.record_provider(metrics, "modrinth", "skipped", 0, 0, 0.0)
        collector.record_provider(metrics, "curseforge", "timeout", 0, 0, 8000.0, "timed out")

        assert metrics.providers_called == 2
        assert metrics.providers_succeeded == 1
        assert metrics.providers_failed == 1
        assert len(metrics.provider_metrics) == 3
        assert metrics.provider_metrics[2] == ProviderMetrics(
            provider_id="curseforge",
            status="timeout",
            result_count=0,
            total_hits=0,
            latency_ms=8000.0,
            error_message="timed out",
        )

    def test_track_search_logs_error_when_every_source_fails(self, caplog):
        collector = SearchMetricsCollector()

        with caplog.at_level(logging.INFO, logger="catalog.metrics"):
            with collector.track_search("sky", "all") as metrics:
                collector.record_provider(metrics, "modrinth", "error", 0, 0, 5.0, "boom")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.event == "search_complete"
        assert metrics.total_latency_ms >= 0

    def test_cache_hit_is_logged_as_a_cached_search(self, caplog):
        collector = SearchMetricsCollector()

        with caplog.at_level(logging.INFO, logger="catalog.metrics"):
            collector.record_cache_hit("sky", "modrinth", 3, 812)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.event == "search_complete"
        assert record.cached is True
        assert record.results == {"returned": 3, "total_hits": 812}
        assert record.providers["called"] == 0


class TestPrometheusUpdates:
    def test_provider_failure_increments_error_counter(self):
        before = _sample("catalog_source_errors_total", {"source": "modrinth", "error_type": "timeout"})

        log_provider_result("modrinth", "timeout", 0, 8000.0, "timed out")

        after = _sample("catalog_source_errors_total", {"source": "modrinth", "error_type": "timeout"})
        assert after == before + 1

    def test_sync_complete_counts_items(self):
        labels = {"platform": "CurseForge", "outcome": "failed"}
        before = _sample("catalog_sync_items_total", labels)

        log_sync_complete("CurseForge", 47, 3, 50, 1200.0)

        assert _sample("catalog_sync_items_total", labels) == before + 3

    def test_sync_failed_logs_kind(self, caplog):
        with caplog.at_level(logging.ERROR, logger="catalog.metrics"):
            log_sync_failed("Modrinth", "empty_upstream_page", "no items found")

        assert caplog.records[-1].kind == "empty_upstream_page"


class TestLoggingFilters:
    def test_sensitive_extra_fields_are_redacted(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "calling %s", ({"x-api-key": "secret"},), None)
        record.curseforge_api_key = "secret"

        SensitiveDataFilter().filter(record)

        assert record.curseforge_api_key == "[REDACTED]"
        assert record.args == {"x-api-key": "[REDACTED]"}

    def test_correlation_id_is_scoped_to_context(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

        with correlation_id_context("req-abc") as correlation_id:
            assert get_correlation_id() == "req-abc"
            ContextFilter().filter(record)

        assert correlation_id == "req-abc"
        assert record.correlation_id == "req-abc"
        assert get_correlation_id() is None

    def test_bound_fields_are_stamped_without_overriding_extras(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        record.items = 3

        with log_context(platform="Modrinth", items=99):
            with log_context(sync_id="abc"):
                ContextFilter().filter(record)

        assert record.platform == "Modrinth"
        assert record.sync_id == "abc"
        assert record.items == 3
        assert record.correlation_id == "none"
