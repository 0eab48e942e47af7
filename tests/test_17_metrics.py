"""Tests for Prometheus metrics."""
from __future__ import annotations

import pytest

from agent_memo.core.metrics import MemoMetrics, metrics


class TestMemoMetrics:
    """Test MemoMetrics on a fresh registry."""

    @pytest.fixture
    def m(self):
        return MemoMetrics()

    def test_record_request(self, m):
        m.record_request(mode="simulation", status="success", duration=0.5, audio_bytes=7818)
        reg = m.registry
        assert reg.get_sample_value("memo_requests_total", {"mode": "simulation", "status": "success"}) == 1
        assert reg.get_sample_value("memo_audio_bytes_total") == 7818
        assert reg.get_sample_value("memo_request_duration_seconds_count", {"mode": "simulation"}) == 1

    def test_zero_bytes_not_counted(self, m):
        m.record_request(mode="paid-api", status="error", duration=0.1)
        assert m.registry.get_sample_value("memo_audio_bytes_total") == 0

    def test_record_error(self, m):
        m.record_error(mode="paid-api", code="MISSING_CREDENTIALS")
        m.record_error(mode="paid-api", code="MISSING_CREDENTIALS")
        value = m.registry.get_sample_value(
            "memo_provider_errors_total", {"mode": "paid-api", "code": "MISSING_CREDENTIALS"}
        )
        assert value == 2

    def test_audio_fetch_and_index_size(self, m):
        m.record_audio_fetch("hit")
        m.set_index_size(4)
        assert m.registry.get_sample_value("memo_audio_fetch_total", {"result": "hit"}) == 1
        assert m.registry.get_sample_value("memo_index_size") == 4

    def test_instances_do_not_collide(self):
        a, b = MemoMetrics(), MemoMetrics()
        a.set_index_size(3)
        assert b.registry.get_sample_value("memo_index_size") == 0

    def test_get_metrics_response(self, m):
        body, content_type = m.get_metrics_response()
        assert isinstance(body, bytes)
        assert content_type.startswith("text/plain")
        assert b"memo_requests_total" in body


class TestMetricsEndpoint:
    """Test GET /metrics."""

    def test_metrics_endpoint(self, client):
        client.post("/memo", json={"text": "count me", "voice": "june"})
        r = client.get("/metrics")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/plain")
        assert 'memo_requests_total{mode="simulation",status="success"}' in r.text
        assert "memo_index_size" in r.text

    def test_global_instance(self):
        assert isinstance(metrics, MemoMetrics)
