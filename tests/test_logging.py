"""Tests for structured logging helpers and metrics."""

import structlog

from librarian.infrastructure.observability.logging import MetricsCollector, add_service_context


class TestServiceContext:
    """Tests for add_service_context."""

    def test_adds_timestamp(self):
        event = add_service_context(None, "info", {"event": "x"})

        assert "timestamp" in event

    def test_adds_bound_session_token(self):
        """The token bound for a tool call is attached."""
        with structlog.contextvars.bound_contextvars(session_token="tok"):
            event = add_service_context(None, "info", {"event": "x"})

        assert event["session_token"] == "tok"

    def test_explicit_token_wins(self):
        with structlog.contextvars.bound_contextvars(session_token="bound"):
            event = add_service_context(None, "info", {"event": "x", "session_token": "explicit"})

        assert event["session_token"] == "explicit"


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_latency_summary(self):
        """Latencies are summarized as count, avg, min and max."""
        collector = MetricsCollector()
        collector.record_latency("tool.x", 10)
        collector.record_latency("tool.x", 30)

        summary = collector.get_metrics_summary()

        assert summary["latency.tool.x"] == {"count": 2, "avg": 20, "min": 10, "max": 30}

    def test_counters_and_gauges(self):
        collector = MetricsCollector()
        collector.increment_counter("sessions.started")
        collector.increment_counter("sessions.started", 2)
        collector.set_gauge("sessions.active", 3)

        summary = collector.get_metrics_summary()

        assert summary["sessions.started"] == 3
        assert summary["sessions.active"] == 3

    def test_empty_summary(self):
        """Nothing recorded means an empty summary."""
        assert MetricsCollector().get_metrics_summary() == {}

    def test_latencies_kept_per_operation(self):
        collector = MetricsCollector()
        collector.record_latency("tool.a", 5)
        collector.record_latency("tool.b", 7)

        summary = collector.get_metrics_summary()

        assert summary["latency.tool.a"]["count"] == 1
        assert summary["latency.tool.b"]["avg"] == 7
