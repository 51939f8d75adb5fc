"""
Observability utilities for the Format Converter.

In-process metrics for the conversion path (cache hits/misses, upstream
latency and failures) and a small health-check registry.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Metrics Collection
# =============================================================================

class MetricsCollector:
    """
    Collect and aggregate counters and histograms.

    Thread-safe singleton for application-wide metrics.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._counters: Dict[str, float] = {}
                cls._instance._histograms: Dict[str, List[float]] = {}
        return cls._instance

    def _make_key(self, name: str, tags: Optional[Dict[str, str]] = None) -> str:
        """Create a unique key for a metric with tags."""
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter metric."""
        key = self._make_key(name, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def histogram(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a histogram value, keeping the most recent 1000 samples."""
        key = self._make_key(name, tags)
        with self._lock:
            values = self._histograms.setdefault(key, [])
            values.append(value)
            del values[:-1000]

    @contextmanager
    def timer(self, name: str, tags: Optional[Dict[str, str]] = None):
        """
        Context manager to time an operation.

        Records ``<name>_duration_ms`` on exit, whether or not the block raised.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.histogram(f"{name}_duration_ms", duration_ms, tags)

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        """Get current counter value."""
        return self._counters.get(self._make_key(name, tags), 0)

    def get_histogram_stats(self, name: str, tags: Optional[Dict[str, str]] = None) -> Dict[str, float]:
        """Get histogram statistics."""
        return self._stats(self._histograms.get(self._make_key(name, tags), []))

    @staticmethod
    def _stats(values: List[float]) -> Dict[str, float]:
        if not values:
            return {"count": 0, "min": 0, "max": 0, "avg": 0, "p50": 0, "p95": 0}

        sorted_values = sorted(values)
        count = len(sorted_values)

        return {
            "count": count,
            "min": sorted_values[0],
            "max": sorted_values[-1],
            "avg": sum(sorted_values) / count,
            "p50": sorted_values[int(count * 0.50)],
            "p95": sorted_values[min(int(count * 0.95), count - 1)],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "histograms": {
                    key: self._stats(values) for key, values in self._histograms.items()
                },
                "timestamp": _utcnow().isoformat(),
            }

    def clear(self) -> None:
        """Clear all metrics (useful for testing)."""
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


# Global metrics instance
metrics = MetricsCollector()


def record_conversion_metrics(fmt: str, outcome: str) -> None:
    """
    Count one conversion call.

    ``outcome`` is one of: hit, miss, rendered, failed.
    """
    metrics.increment("conversion.requests", tags={"format": fmt, "outcome": outcome})


def record_upstream_metrics(model: str, duration_ms: float, success: bool) -> None:
    """Record one call to the text-generation API."""
    metrics.increment("upstream.requests", tags={"model": model, "success": str(success).lower()})
    metrics.histogram("upstream.duration_ms", duration_ms, tags={"model": model})


# =============================================================================
# Health Checks
# =============================================================================

class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0


class HealthChecker:
    """
    Health check registry and executor.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._checks: Dict[str, Callable[[], HealthCheckResult]] = {}
        return cls._instance

    def register(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> None:
        self._checks[name] = check_fn

    def check(self, name: str) -> HealthCheckResult:
        """Run a specific health check."""
        if name not in self._checks:
            return HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Unknown check: {name}",
            )

        start = time.perf_counter()
        try:
            result = self._checks[name]()
        except Exception as e:
            logger.warning("Health check %s raised: %s", name, e)
            result = HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        result.duration_ms = (time.perf_counter() - start) * 1000
        return result

    def check_all(self) -> Dict[str, Any]:
        """Run all health checks."""
        results = {}
        overall_status = HealthStatus.HEALTHY

        for name in self._checks:
            result = self.check(name)
            results[name] = {
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status != HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status.value,
            "checks": results,
            "timestamp": _utcnow().isoformat(),
        }


# Global health checker instance
health_checker = HealthChecker()


# =============================================================================
# Built-in Health Checks
# =============================================================================

def check_database() -> HealthCheckResult:
    """Check database connectivity."""
    from django.db import connection

    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    return HealthCheckResult(
        name="database",
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
    )


def check_converter_config() -> HealthCheckResult:
    """A missing API key only degrades service: original content still renders."""
    from apps.conversion.config import ConverterConfig

    config = ConverterConfig.load()
    if config.has_credentials:
        return HealthCheckResult(
            name="converter",
            status=HealthStatus.HEALTHY,
            message="API key configured",
            details={"model": config.model},
        )
    return HealthCheckResult(
        name="converter",
        status=HealthStatus.DEGRADED,
        message="API key not configured",
        details={"model": config.model},
    )


def register_default_checks():
    """Register default health checks."""
    health_checker.register("database", check_database)
    health_checker.register("converter", check_converter_config)
