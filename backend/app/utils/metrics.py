"""Prometheus metrics for LLM calls and decision lifecycle events."""

from prometheus_client import Counter, Histogram

# LLM gateway metrics
llm_latency_ms = Histogram(
    "signal_llm_latency_ms",
    "LLM call latency in milliseconds",
    ["operation", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000, 64000],
)

llm_errors_total = Counter(
    "signal_llm_errors_total",
    "Total failed LLM calls",
    ["operation", "reason"],
)

# Lifecycle metrics
lifecycle_events_total = Counter(
    "signal_lifecycle_events_total",
    "Decision lifecycle events (deletions, undos, review commits, analyses)",
    ["event"],
)


class PrometheusLLMMetrics:
    """Prometheus-based LLM metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record LLM call latency."""
        llm_latency_ms.labels(operation=operation, outcome=outcome).observe(latency_ms)

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        llm_errors_total.labels(operation=operation, reason=reason).inc()


def record_lifecycle_event(event: str) -> None:
    """Count a lifecycle event."""
    lifecycle_events_total.labels(event=event).inc()
