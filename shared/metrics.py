"""
Shared metrics configuration for the OIDC Access Layer.
"""

from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several service instances (tests,
    embedded apps) can coexist in one process.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

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

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._setup_oidc_metrics()

    def _setup_oidc_metrics(self):
        """Set up token validation metrics."""
        self._metrics["oidc_token_validations_total"] = Counter(
            "oidc_token_validations_total",
            "Total ID token validations",
            ["outcome", "code"],
            registry=self.registry
        )

        self._metrics["oidc_signing_key_renewals_total"] = Counter(
            "oidc_signing_key_renewals_total",
            "Signing key renewals triggered by signature mismatches",
            ["issuer"],
            registry=self.registry
        )

        self._metrics["oidc_signing_key_fetches_total"] = Counter(
            "oidc_signing_key_fetches_total",
            "Signing key set fetches from identity providers",
            ["outcome"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

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

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_token_validation(self, outcome: str, code: str = ""):
        """Record the outcome of one token validation."""
        self._metrics["oidc_token_validations_total"].labels(outcome=outcome, code=code).inc()

    def record_key_renewal(self, issuer: str):
        """Record a signing key renewal for an issuer."""
        self._metrics["oidc_signing_key_renewals_total"].labels(issuer=issuer).inc()

    def record_key_fetch(self, outcome: str):
        """Record a signing key set fetch."""
        self._metrics["oidc_signing_key_fetches_total"].labels(outcome=outcome).inc()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
