"""Tests for metrics module."""

from unittest.mock import MagicMock

import pytest

from api.metrics import (
    AI_BOT_DETECTIONS_TOTAL,
    ANALYZER_RUNS_TOTAL,
    BOT_DECISIONS_TOTAL,
    REVENUE_TOTAL,
    SITES_REGISTERED_TOTAL,
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    record_ai_bot_detection,
    record_analyzer_run,
    record_decision,
    record_revenue,
    record_site_registered,
)


class TestMetricsOutput:
    """Tests for metrics output generation."""

    def test_get_metrics_returns_bytes(self):
        assert isinstance(get_metrics(), bytes)

    def test_get_metrics_content_type(self):
        content_type = get_metrics_content_type()
        assert "text/plain" in content_type or "openmetrics" in content_type

    def test_get_metrics_contains_custom_metrics(self):
        output = get_metrics().decode("utf-8")
        assert "crawltoll_http_requests_total" in output
        assert "crawltoll_http_request_duration_seconds" in output
        assert "crawltoll_bot_decisions_total" in output


class TestMetricsMiddleware:
    """Tests for metrics middleware."""

    @pytest.fixture
    def middleware(self):
        return MetricsMiddleware(MagicMock())

    def test_normalize_path_uuid(self, middleware):
        path = "/v1/sites/550e8400-e29b-41d4-a716-446655440000/analytics"
        assert middleware._normalize_path(path) == "/v1/sites/{id}/analytics"

    def test_normalize_path_numeric_id(self, middleware):
        assert middleware._normalize_path("/v1/payments/12345") == "/v1/payments/{id}"

    def test_normalize_path_unchanged(self, middleware):
        assert middleware._normalize_path("/v1/monetize") == "/v1/monetize"

    def test_excluded_paths(self, middleware):
        assert "/metrics" in middleware.EXCLUDE_PATHS
        assert "/health" in middleware.EXCLUDE_PATHS


class TestBusinessMetrics:
    """Tests for business metric helpers."""

    def test_record_decision(self):
        counter = BOT_DECISIONS_TOTAL.labels(action="allow", reason="not_ai_bot")
        before = counter._value.get()
        record_decision("allow", "not_ai_bot")
        assert counter._value.get() == before + 1

    def test_record_ai_bot_detection(self):
        counter = AI_BOT_DETECTIONS_TOTAL.labels(company="Anthropic")
        before = counter._value.get()
        record_ai_bot_detection("Anthropic")
        assert counter._value.get() == before + 1

    def test_record_revenue(self):
        counter = REVENUE_TOTAL.labels(source="payment")
        before = counter._value.get()
        record_revenue("payment", 0.25)
        assert counter._value.get() == pytest.approx(before + 0.25)

    def test_record_revenue_ignores_zero(self):
        counter = REVENUE_TOTAL.labels(source="subscription")
        before = counter._value.get()
        record_revenue("subscription", 0.0)
        assert counter._value.get() == before

    def test_record_analyzer_run(self):
        counter = ANALYZER_RUNS_TOTAL.labels(risk_score="critical")
        before = counter._value.get()
        record_analyzer_run("critical")
        assert counter._value.get() == before + 1

    def test_record_site_registered(self):
        before = SITES_REGISTERED_TOTAL._value.get()
        record_site_registered()
        assert SITES_REGISTERED_TOTAL._value.get() == before + 1
