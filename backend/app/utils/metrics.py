"""Prometheus metrics for itinerary generation."""

from prometheus_client import Counter, Histogram

generation_attempt_latency_ms = Histogram(
    "generation_attempt_latency_ms",
    "Remote generation call latency in milliseconds",
    ["outcome"],
    buckets=[500, 1000, 2500, 5000, 10000, 20000, 40000, 80000],
)

generation_attempts_total = Counter(
    "generation_attempts_total",
    "Total remote generation attempts",
    ["outcome"],
)

generation_results_total = Counter(
    "generation_results_total",
    "Total generation requests by mode and result",
    ["mode", "result"],
)


class PrometheusGenerationMetrics:
    """Prometheus-based generation metrics implementation."""

    def record_attempt(self, outcome: str, latency_ms: float) -> None:
        """Record one remote call attempt."""
        generation_attempt_latency_ms.labels(outcome=outcome).observe(latency_ms)
        generation_attempts_total.labels(outcome=outcome).inc()

    def inc_result(self, mode: str, result: str) -> None:
        """Increment the per-request result counter."""
        generation_results_total.labels(mode=mode, result=result).inc()
