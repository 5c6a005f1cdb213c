"""Prometheus-backed metrics for the reader engine."""

from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram


class ReaderMetrics:
    """Container for reader-engine Prometheus metrics."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        kwargs = {"registry": registry} if registry is not None else {}

        # Page loading -----------------------------------------------------------
        self.page_load_duration = Histogram(
            "reader_page_load_duration_seconds",
            "Latency for loading one section page from the text store.",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
            **kwargs,
        )
        self.page_segments = Histogram(
            "reader_page_segments",
            "Segments contained in a loaded page.",
            buckets=(0, 1, 5, 10, 20, 40, 80, 160, 320),
            **kwargs,
        )
        self.page_loads = Counter(
            "reader_page_loads_total",
            "Page loads by window edge and outcome.",
            ["edge", "outcome"],
            **kwargs,
        )

        # Window -----------------------------------------------------------------
        self.window_segments = Histogram(
            "reader_window_segments",
            "Segments held by the window after each change.",
            buckets=(0, 10, 25, 50, 100, 200, 400, 800, 1600),
            **kwargs,
        )
        self.stale_discarded = Counter(
            "reader_stale_responses_total",
            "Page responses discarded because the window generation moved on.",
            ["edge"],
            **kwargs,
        )

        # Virtual list -----------------------------------------------------------
        self.size_cache_resets = Counter(
            "reader_size_cache_resets_total",
            "Bulk invalidations of the item size cache.",
            ["reason"],
            **kwargs,
        )

    # --------------------------------------------------------------------- API -
    def record_page_loaded(self, *, edge: str, segments: int, duration_ms: float) -> None:
        self.page_load_duration.observe(max(duration_ms, 0.0) / 1000.0)
        self.page_segments.observe(max(segments, 0))
        self.page_loads.labels(edge=edge, outcome="ok").inc()

    def record_page_failed(self, *, edge: str) -> None:
        self.page_loads.labels(edge=edge, outcome="error").inc()

    def record_window_changed(self, *, segments: int) -> None:
        self.window_segments.observe(max(segments, 0))

    def record_stale_discarded(self, *, edge: str) -> None:
        self.stale_discarded.labels(edge=edge).inc()

    def record_sizes_reset(self, *, reason: str) -> None:
        self.size_cache_resets.labels(reason=reason).inc()


_default_metrics: Optional[ReaderMetrics] = ReaderMetrics()
_metrics: Optional[ReaderMetrics] = _default_metrics


def set_metrics(metrics: Optional[ReaderMetrics]) -> None:
    """Override the global metrics collector (primarily for tests)."""

    global _metrics
    _metrics = metrics


def reset_metrics() -> None:
    """Reset the global metrics collector to the default instance."""

    global _metrics
    _metrics = _default_metrics


def get_metrics() -> Optional[ReaderMetrics]:
    """Return the current metrics collector, if metrics are enabled."""

    return _metrics


def record_page_loaded(*, edge: str, segments: int, duration_ms: float) -> None:
    metrics = get_metrics()
    if metrics is not None:
        metrics.record_page_loaded(edge=edge, segments=segments, duration_ms=duration_ms)


def record_page_failed(*, edge: str) -> None:
    metrics = get_metrics()
    if metrics is not None:
        metrics.record_page_failed(edge=edge)


def record_window_changed(*, segments: int) -> None:
    metrics = get_metrics()
    if metrics is not None:
        metrics.record_window_changed(segments=segments)


def record_stale_discarded(*, edge: str) -> None:
    metrics = get_metrics()
    if metrics is not None:
        metrics.record_stale_discarded(edge=edge)


def record_sizes_reset(*, reason: str) -> None:
    metrics = get_metrics()
    if metrics is not None:
        metrics.record_sizes_reset(reason=reason)


__all__ = [
    "ReaderMetrics",
    "CollectorRegistry",
    "get_metrics",
    "record_page_failed",
    "record_page_loaded",
    "record_sizes_reset",
    "record_stale_discarded",
    "record_window_changed",
    "reset_metrics",
    "set_metrics",
]
