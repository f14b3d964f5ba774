"""
Shared metrics configuration for the Aplos token sidecar.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for a service.

    Each collector owns its registry unless one is passed in, so several
    service instances can live in one process (tests build many apps).
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type"],
            registry=self.registry
        )

        self._setup_sidecar_metrics()

    def _setup_sidecar_metrics(self):
        """Set up token sidecar metrics."""
        self._metrics["tokens_decrypted_total"] = Counter(
            "tokens_decrypted_total",
            "Tokens decrypted, by padding scheme that succeeded",
            ["scheme"],
            registry=self.registry
        )

        self._metrics["decrypt_failures_total"] = Counter(
            "decrypt_failures_total",
            "Ciphertexts no padding scheme could decrypt",
            registry=self.registry
        )

        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Aplos auth requests by outcome",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["perimeter_rejections_total"] = Counter(
            "perimeter_rejections_total",
            "Requests rejected by the network perimeter",
            registry=self.registry
        )

        self._metrics["rate_limit_hits_total"] = Counter(
            "rate_limit_hits_total",
            "Requests rejected by the rate limiter",
            ["endpoint"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get metric by name."""
        return self._metrics.get(name)

    def render(self) -> bytes:
        """Render this collector's registry in the Prometheus text format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(error_type=error_type).inc()

    def record_decryption(self, scheme: str):
        """Record a successful decryption."""
        self._metrics["tokens_decrypted_total"].labels(scheme=scheme).inc()

    def record_decrypt_failure(self):
        """Record a ciphertext that no scheme could decrypt."""
        self._metrics["decrypt_failures_total"].inc()

    def record_upstream(self, outcome: str):
        """Record an Aplos auth call outcome."""
        self._metrics["upstream_requests_total"].labels(outcome=outcome).inc()

    def record_perimeter_rejection(self):
        """Record a request refused at the perimeter."""
        self._metrics["perimeter_rejections_total"].inc()

    def record_rate_limit_hit(self, endpoint: str):
        """Record a rate-limited request."""
        self._metrics["rate_limit_hits_total"].labels(endpoint=endpoint).inc()

    def get_sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read back a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get metrics collector for service."""
    return MetricsCollector(service_name, registry)
