from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest


class HookMetrics:
    """Request counters and latency histogram for the hook endpoints.

    Each instance owns its registry so several apps can live in one process.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._requests = Counter(
            "mqtt_webhook_requests_total",
            "Broker hook requests by hook and response status.",
            ("hook", "status"),
            registry=self.registry,
        )
        self._duration = Histogram(
            "mqtt_webhook_request_duration_seconds",
            "Time spent deciding a broker hook.",
            ("hook",),
            registry=self.registry,
        )

    def observe(self, hook: str, status: int, duration: float) -> None:
        self._requests.labels(hook=hook, status=str(status)).inc()
        self._duration.labels(hook=hook).observe(duration)

    def render(self) -> bytes:
        return generate_latest(self.registry)


__all__ = ["HookMetrics"]
