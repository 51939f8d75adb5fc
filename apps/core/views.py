"""
Health check and observability views.

HTTP endpoints for health checks, probes and in-process metrics.
"""

from django.conf import settings
from django.http import JsonResponse
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from apps.core.observability import (
    health_checker,
    metrics,
    HealthStatus,
)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """
    Health check endpoint.

    GET /health/ - Run all health checks
    GET /health/<check_name>/ - Run specific health check
    """

    def get(self, request, check_name=None):
        if check_name:
            result = health_checker.check(check_name)
            status_code = 503 if result.status == HealthStatus.UNHEALTHY else 200
            return JsonResponse({
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }, status=status_code)

        results = health_checker.check_all()
        results["version"] = settings.VERSION
        # A degraded converter still serves original content.
        status_code = 503 if results["status"] == HealthStatus.UNHEALTHY.value else 200
        return JsonResponse(results, status=status_code)


@method_decorator(csrf_exempt, name='dispatch')
class LivenessView(View):
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessView(View):
    """
    Readiness probe endpoint.

    Returns 200 once the database answers.
    """

    def get(self, request):
        db_check = health_checker.check("database")

        if db_check.status == HealthStatus.HEALTHY:
            return JsonResponse({"status": "ready"})
        return JsonResponse({
            "status": "not_ready",
            "reason": db_check.message,
        }, status=503)


@method_decorator(csrf_exempt, name='dispatch')
class MetricsView(View):
    """
    GET /metrics/ - Get all metrics
    """

    def get(self, request):
        return JsonResponse(metrics.get_all_metrics())
