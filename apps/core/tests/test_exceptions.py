"""
Tests for the flat error format produced by the API exception handler.
"""

import os
import subprocess
import sys

import pytest
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory
from rest_framework import serializers
from rest_framework.exceptions import NotAuthenticated, Throttled

from apps.core.exceptions import (
    AuthError,
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
    converter_exception_handler,
)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def context():
    request = RequestFactory().post('/api/conversion/convert/')
    request.request_id = 'req-1'
    return {'request': request}


# ============================================================================
# Exception Tests
# ============================================================================

class TestConverterExceptions:
    """Defaults carried by each error kind."""

    @pytest.mark.parametrize("exc_class,status_code,code", [
        (NotFoundError, 404, ErrorCode.NOT_FOUND),
        (ValidationError, 400, ErrorCode.VALIDATION_ERROR),
        (ConfigurationError, 503, ErrorCode.NOT_CONFIGURED),
        (UpstreamError, 502, ErrorCode.UPSTREAM_ERROR),
        (UpstreamTimeoutError, 504, ErrorCode.UPSTREAM_TIMEOUT),
        (AuthError, 403, ErrorCode.INVALID_REQUEST_TOKEN),
    ])
    def test_status_and_code(self, exc_class, status_code, code):
        exc = exc_class()
        assert exc.status_code == status_code
        assert exc.error_code == code

    def test_upstream_message_kept_for_logs(self):
        exc = UpstreamError("Incorrect API key provided")

        assert str(exc) == "Incorrect API key provided"
        assert exc.message == "Conversion failed. Please try again."

    def test_timeout_is_upstream_error(self):
        assert isinstance(UpstreamTimeoutError(), UpstreamError)

    def test_custom_message(self):
        exc = ValidationError("Invalid format requested", code=ErrorCode.INVALID_FORMAT)
        assert exc.message == "Invalid format requested"
        assert exc.error_code == ErrorCode.INVALID_FORMAT


# ============================================================================
# Handler Tests
# ============================================================================

class TestExceptionHandler:
    """Every error becomes {"error", "code", "request_id"}."""

    def test_converter_exception(self, context):
        response = converter_exception_handler(NotFoundError(), context)

        assert response.status_code == 404
        assert response.data == {
            "error": "Article not found",
            "code": "NOT_FOUND",
            "request_id": "req-1",
        }

    def test_upstream_detail_not_leaked(self, context):
        response = converter_exception_handler(UpstreamError("secret provider detail"), context)

        assert response.status_code == 502
        assert response.data["error"] == "Conversion failed. Please try again."

    def test_django_validation_error(self, context):
        response = converter_exception_handler(DjangoValidationError("bad value"), context)

        assert response.status_code == 400
        assert response.data["error"] == "bad value"

    def test_http404(self, context):
        response = converter_exception_handler(Http404(), context)

        assert response.status_code == 404
        assert response.data["error"] == "Resource not found"

    def test_serializer_field_errors_flattened(self, context):
        exc = serializers.ValidationError({"post_id": ["A valid integer is required."]})
        response = converter_exception_handler(exc, context)

        assert response.status_code == 400
        assert response.data["error"] == "post_id: A valid integer is required."

    def test_throttled(self, context):
        response = converter_exception_handler(Throttled(wait=10), context)

        assert response.status_code == 429
        assert response.data["code"] == "RATE_LIMITED"

    def test_not_authenticated(self, context):
        response = converter_exception_handler(NotAuthenticated(), context)

        assert response.data["code"] == "AUTHENTICATION_REQUIRED"

    def test_unhandled_exception(self, context):
        response = converter_exception_handler(RuntimeError("boom"), context)

        assert response.status_code == 500
        assert response.data["error"] == "An unexpected error occurred"
        assert "boom" not in response.data["error"]


# ============================================================================
# Import Order Tests
# ============================================================================

class TestImportOrder:
    """Error classes import cleanly before DRF's views are loaded."""

    @pytest.mark.parametrize("module", [
        "apps.core.exceptions",
        "apps.core.permissions",
        "apps.conversion.llm",
        "apps.conversion.service",
    ])
    def test_fresh_interpreter_import(self, module):
        code = f"import django; django.setup(); import {module}"
        env = {
            **os.environ,
            "DJANGO_SETTINGS_MODULE": "config.settings.test",
            "PYTHONPATH": str(settings.BASE_DIR),
        }

        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=settings.BASE_DIR,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
