"""
Prometheus Metrics for the memo service.

Metrics Exposed:
    memo_requests_total             - Memo creations by TTS mode and status
    memo_request_duration_seconds   - Memo creation latency by TTS mode
    memo_audio_bytes_total          - Audio bytes produced
    memo_provider_errors_total      - Failed creations by TTS mode and error code
    memo_audio_fetch_total          - GET /audio outcomes (hit/miss)
    memo_index_size                 - Memos currently held in the memo index

Usage:
    from agent_memo.core.metrics import metrics

    metrics.record_request(mode="simulation", status="success", duration=1.4, audio_bytes=7818)
    metrics.record_audio_fetch("miss")

    content, content_type = metrics.get_metrics_response()

Prometheus Scrape Config Example:
    scrape_configs:
      - job_name: 'agent-memo'
        static_configs:
          - targets: ['localhost:3000']
        metrics_path: '/metrics'
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class MemoMetrics:
    """
    Memo service metrics on a private CollectorRegistry.

    A private registry keeps repeated app construction (tests, the CLI)
    from colliding on the global default registry.
    """

    def __init__(self) -> None:
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "memo_requests_total",
            "Total memo creation requests",
            ["mode", "status"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "memo_request_duration_seconds",
            "Memo creation duration in seconds",
            ["mode"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "memo_audio_bytes_total",
            "Total audio bytes generated",
            registry=self._registry,
        )
        self._provider_errors = Counter(
            "memo_provider_errors_total",
            "Failed memo creations by error code",
            ["mode", "code"],
            registry=self._registry,
        )
        self._audio_fetch = Counter(
            "memo_audio_fetch_total",
            "Audio fetches by result",
            ["result"],
            registry=self._registry,
        )
        self._index_size = Gauge(
            "memo_index_size",
            "Memos currently held in the memo index",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_request(
        self,
        mode: str,
        status: str,
        duration: float,
        audio_bytes: int = 0,
    ) -> None:
        """
        Record a completed memo creation.

        Args:
            mode: Canonical TTS mode ("simulation", "free-streaming", "paid-api").
            status: "success" or "error".
            duration: Wall time for the whole creation, in seconds.
            audio_bytes: Size of the stored audio.
        """
        self._requests_total.labels(mode=mode, status=status).inc()
        self._request_duration.labels(mode=mode).observe(duration)
        if audio_bytes > 0:
            self._audio_bytes_total.inc(audio_bytes)

    def record_error(self, mode: str, code: str) -> None:
        self._provider_errors.labels(mode=mode, code=code).inc()

    def record_audio_fetch(self, result: str) -> None:
        """Record an audio fetch, ``result`` is "hit" or "miss"."""
        self._audio_fetch.labels(result=result).inc()

    def set_index_size(self, size: int) -> None:
        self._index_size.set(size)

    def get_metrics_response(self) -> tuple[bytes, str]:
        """Return (body, content_type) in Prometheus exposition format."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Global instance: from agent_memo.core.metrics import metrics
metrics = MemoMetrics()
