from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from app.moduz.core.config import settings


@dataclass
class MetricsSnapshot:
    content: bytes
    content_type: str


class Metrics:
    def __init__(self) -> None:
        self.enabled = bool(settings.METRICS_ENABLED)
        self._registry: CollectorRegistry | None = None
        if self.enabled:
            self._initialize_registry()

    def _initialize_registry(self) -> None:
        self._registry = CollectorRegistry()
        self._http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by route/method/status.",
            ["route", "method", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "HTTP request latency in milliseconds.",
            ["route", "method", "status"],
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000),
            registry=self._registry,
        )
        self._authz_denied_total = Counter(
            "authz_denied_total",
            "Authorization gate denials by error code.",
            ["code"],
            registry=self._registry,
        )
        self._module_toggle_total = Counter(
            "module_toggle_total",
            "Module toggle attempts by module and outcome.",
            ["module", "result"],
            registry=self._registry,
        )
        self._audit_write_failed_total = Counter(
            "audit_write_failed_total",
            "Audit events that could not be persisted.",
            ["action"],
            registry=self._registry,
        )
        self._lock_wait_timeout_total = Counter(
            "lock_wait_timeout_total",
            "Lock wait timeout occurrences.",
            registry=self._registry,
        )

    def record_http_request(self, *, route: str, method: str, status_code: int, latency_ms: float) -> None:
        if not self.enabled:
            return
        labels = {"route": route, "method": method, "status": str(status_code)}
        self._http_requests_total.labels(**labels).inc()
        self._http_request_duration_ms.labels(**labels).observe(latency_ms)

    def increment_authz_denied(self, code: str) -> None:
        if self.enabled:
            self._authz_denied_total.labels(code=code).inc()

    def record_module_toggle(self, module: str, result: str) -> None:
        if self.enabled:
            self._module_toggle_total.labels(module=module, result=result).inc()

    def increment_audit_write_failed(self, action: str) -> None:
        if self.enabled:
            self._audit_write_failed_total.labels(action=action).inc()

    def increment_lock_wait_timeout(self) -> None:
        if self.enabled:
            self._lock_wait_timeout_total.inc()

    def sample(self, name: str, labels: dict | None = None) -> float | None:
        if not self.enabled:
            return None
        return self._registry.get_sample_value(name, labels or {})

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(content=b"metrics_disabled\n", content_type="text/plain")
        return MetricsSnapshot(content=generate_latest(self._registry), content_type=CONTENT_TYPE_LATEST)


metrics = Metrics()
