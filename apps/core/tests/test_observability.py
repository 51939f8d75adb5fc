"""
Tests for observability features: request IDs, metrics and health endpoints.

Tests cover:
- Request ID middleware functionality
- X-Request-ID header propagation
- Celery task request context
- Metrics collector aggregation
- Health, liveness, readiness and metrics endpoints
"""

import pytest
import uuid
from unittest.mock import patch
from django.test import RequestFactory, override_settings
from django.http import HttpResponse

from apps.core.middleware import (
    RequestIDMiddleware,
    clear_request_context,
    get_request_id,
    setup_celery_request_context,
)
from apps.core.observability import (
    HealthCheckResult,
    HealthChecker,
    HealthStatus,
    MetricsCollector,
    record_conversion_metrics,
)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def collector():
    """A cleared metrics collector."""
    collector = MetricsCollector()
    collector.clear()
    yield collector
    collector.clear()


@pytest.fixture(autouse=True)
def reset_request_context():
    clear_request_context()
    yield
    clear_request_context()


# ============================================================================
# Request ID Middleware Tests
# ============================================================================

class TestRequestIdMiddleware:
    """Test request ID propagation."""

    def _middleware(self):
        return RequestIDMiddleware(lambda request: HttpResponse("ok"))

    def test_generates_request_id(self):
        request = RequestFactory().get('/health/')
        response = self._middleware()(request)

        request_id = response['X-Request-ID']
        assert str(uuid.UUID(request_id)) == request_id
        assert request.request_id == request_id

    def test_keeps_valid_incoming_request_id(self):
        incoming = str(uuid.uuid4())
        request = RequestFactory().get('/health/', HTTP_X_REQUEST_ID=incoming)
        response = self._middleware()(request)

        assert response['X-Request-ID'] == incoming

    def test_replaces_malformed_request_id(self):
        request = RequestFactory().get('/health/', HTTP_X_REQUEST_ID='not-a-uuid')
        response = self._middleware()(request)

        assert response['X-Request-ID'] != 'not-a-uuid'
        uuid.UUID(response['X-Request-ID'])

    def test_context_cleared_after_response(self):
        request = RequestFactory().get('/health/')
        self._middleware()(request)

        assert get_request_id() is None

    def test_setup_celery_context_from_headers(self):
        setup_celery_request_context({'request_id': 'from-web'})
        assert get_request_id() == 'from-web'

    def test_setup_celery_context_generates_id(self):
        setup_celery_request_context({})
        uuid.UUID(get_request_id())


# ============================================================================
# Metrics Tests
# ============================================================================

class TestMetricsCollector:
    """Test in-process metric aggregation."""

    def test_singleton(self):
        assert MetricsCollector() is MetricsCollector()

    def test_increment_with_tags(self, collector):
        collector.increment('conversion.requests', tags={'format': 'ap'})
        collector.increment('conversion.requests', tags={'format': 'ap'})
        collector.increment('conversion.requests', tags={'format': 'original'})

        assert collector.get_counter('conversion.requests', tags={'format': 'ap'}) == 2
        assert collector.get_counter('conversion.requests', tags={'format': 'original'}) == 1
        assert collector.get_counter('conversion.requests') == 0

    def test_histogram_stats(self, collector):
        for value in [10, 20, 30, 40]:
            collector.histogram('upstream.duration_ms', value)

        stats = collector.get_histogram_stats('upstream.duration_ms')
        assert stats['count'] == 4
        assert stats['min'] == 10
        assert stats['max'] == 40
        assert stats['avg'] == 25

    def test_empty_histogram_stats(self, collector):
        assert collector.get_histogram_stats('missing')['count'] == 0

    def test_timer_records_duration_on_error(self, collector):
        with pytest.raises(RuntimeError):
            with collector.timer('convert'):
                raise RuntimeError("boom")

        assert collector.get_histogram_stats('convert_duration_ms')['count'] == 1

    def test_record_conversion_metrics(self, collector):
        record_conversion_metrics('ap', 'hit')

        assert collector.get_counter(
            'conversion.requests', tags={'format': 'ap', 'outcome': 'hit'}
        ) == 1

    def test_get_all_metrics_includes_tagged_histograms(self, collector):
        collector.histogram('upstream.duration_ms', 5, tags={'model': 'gpt-4o-mini'})

        snapshot = collector.get_all_metrics()
        assert snapshot['histograms']['upstream.duration_ms[model=gpt-4o-mini]']['count'] == 1
        assert 'timestamp' in snapshot


# ============================================================================
# Health Check Tests
# ============================================================================

class TestHealthChecker:
    """Test the health check registry."""

    def test_unknown_check_is_unhealthy(self):
        result = HealthChecker().check('does-not-exist')
        assert result.status == HealthStatus.UNHEALTHY

    def test_raising_check_is_unhealthy(self):
        checker = HealthChecker()

        def broken():
            raise ConnectionError("redis down")

        checker.register('broken', broken)
        try:
            result = checker.check('broken')
            assert result.status == HealthStatus.UNHEALTHY
            assert 'redis down' in result.message
        finally:
            checker._checks.pop('broken')

    def test_degraded_does_not_override_unhealthy(self):
        checker = HealthChecker()
        checker.register('a', lambda: HealthCheckResult('a', HealthStatus.UNHEALTHY))
        checker.register('b', lambda: HealthCheckResult('b', HealthStatus.DEGRADED))
        try:
            assert checker.check_all()['status'] == 'unhealthy'
        finally:
            checker._checks.pop('a')
            checker._checks.pop('b')


@pytest.mark.django_db
class TestHealthEndpoints:
    """Test the probe and metrics endpoints."""

    def test_liveness(self, client):
        response = client.get('/livez/')
        assert response.status_code == 200
        assert response.json() == {'status': 'alive'}

    def test_readiness(self, client):
        response = client.get('/readyz/')
        assert response.status_code == 200
        assert response.json()['status'] == 'ready'

    @override_settings(FORMAT_CONVERTER_API_KEY='')
    def test_health_degraded_without_api_key(self, client):
        response = client.get('/health/')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'degraded'
        assert data['checks']['converter']['status'] == 'degraded'
        assert data['checks']['database']['status'] == 'healthy'

    @override_settings(FORMAT_CONVERTER_API_KEY='sk-test')
    def test_health_healthy_with_api_key(self, client):
        response = client.get('/health/')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_single_check(self, client):
        response = client.get('/health/database/')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_readiness_fails_when_database_unhealthy(self, client):
        unhealthy = HealthCheckResult('database', HealthStatus.UNHEALTHY, message='db gone')
        with patch('apps.core.views.health_checker.check', return_value=unhealthy):
            response = client.get('/readyz/')

        assert response.status_code == 503
        assert response.json()['reason'] == 'db gone'

    def test_metrics_endpoint(self, client, collector):
        record_conversion_metrics('original', 'rendered')

        response = client.get('/metrics/')
        assert response.status_code == 200
        assert 'conversion.requests[format=original,outcome=rendered]' in response.json()['counters']
