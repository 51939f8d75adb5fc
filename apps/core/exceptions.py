"""
Standardized error handling for the Format Converter API.

Provides error codes, the conversion error taxonomy, and a DRF exception
handler that flattens every failure to ``{"error": "<message>"}``.
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FORMAT = "INVALID_FORMAT"

    # Authentication/Authorization (401/403)
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_REQUEST_TOKEN = "INVALID_REQUEST_TOKEN"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource errors (404)
    NOT_FOUND = "NOT_FOUND"

    # Configuration errors
    NOT_CONFIGURED = "NOT_CONFIGURED"

    # External service errors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorResponse:
    """Flat error response: the client only needs a message to display."""
    code: ErrorCode
    message: str
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class ConverterException(APIException):
    """Base exception for Format Converter API errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code

        if status_code:
            self.status_code = status_code

        super().__init__(detail=self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            code=self.error_code,
            message=self.message,
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(ConverterException):
    """Validation error."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"


class PermissionDeniedError(ConverterException):
    """Permission denied."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = "Permission denied"


class AuthError(ConverterException):
    """Missing or invalid request token. Raised before any business logic."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.INVALID_REQUEST_TOKEN
    default_detail = "Invalid or missing request token"


class ConversionError(ConverterException):
    """Base class for failures of a single conversion call."""
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "Conversion failed"


class NotFoundError(ConversionError):
    """Requested article does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Article not found"


class ConfigurationError(ConversionError):
    """No API credential configured. Not retryable by the visitor."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = ErrorCode.NOT_CONFIGURED
    default_detail = "API key not configured"


class UpstreamError(ConversionError):
    """
    Transport failure or error response from the text-generation API.

    ``upstream_message`` keeps the provider's own message for the logs; the
    client only ever sees the generic ``default_detail``.
    """
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = ErrorCode.UPSTREAM_ERROR
    default_detail = "Conversion failed. Please try again."

    def __init__(self, upstream_message: str = "", **kwargs):
        self.upstream_message = upstream_message
        super().__init__(**kwargs)

    def __str__(self):
        return self.upstream_message or self.message


class UpstreamTimeoutError(UpstreamError):
    """The text-generation API did not answer within the timeout."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = ErrorCode.UPSTREAM_TIMEOUT
    default_detail = "Conversion timed out. Please try again."


# =============================================================================
# Exception Handler
# =============================================================================

def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def converter_exception_handler(exc, context):
    """
    Custom exception handler for the Format Converter API.

    Converts all exceptions to the flat ``{"error": message}`` format.
    """
    request = context.get('request')
    request_id = get_request_id(request) if request else str(uuid.uuid4())

    if isinstance(exc, ConverterException):
        if isinstance(exc, UpstreamError):
            logger.warning(
                "Upstream failure: %s", exc.upstream_message or exc.message,
                extra={"error_code": exc.error_code.value},
            )
        else:
            logger.info(
                "API Error: %s (%s)", exc.error_code.value, exc.message,
                extra={"error_code": exc.error_code.value},
            )
        return exc.get_error_response(request_id).to_response(exc.status_code)

    if isinstance(exc, DjangoValidationError):
        message = exc.messages[0] if exc.messages else "Validation failed"
        return ErrorResponse(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            request_id=request_id,
        ).to_response(status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return ErrorResponse(
            code=ErrorCode.NOT_FOUND,
            message=str(exc) if str(exc) else "Resource not found",
            request_id=request_id,
        ).to_response(status.HTTP_404_NOT_FOUND)

    # Use DRF's default handler for standard exceptions
    response = drf_exception_handler(exc, context)

    if response is not None:
        error_code = ErrorCode.VALIDATION_ERROR
        if response.status_code == 401:
            error_code = ErrorCode.AUTHENTICATION_REQUIRED
        elif response.status_code == 403:
            error_code = ErrorCode.PERMISSION_DENIED
        elif response.status_code == 404:
            error_code = ErrorCode.NOT_FOUND
        elif response.status_code == 429:
            error_code = ErrorCode.RATE_LIMITED
        elif response.status_code >= 500:
            error_code = ErrorCode.INTERNAL_ERROR

        return ErrorResponse(
            code=error_code,
            message=_flatten_detail(response.data),
            request_id=request_id,
        ).to_response(response.status_code)

    # Unhandled exception - log and return generic error
    logger.exception(
        "Unhandled exception: %s", type(exc).__name__,
        extra={"exception_type": type(exc).__name__},
    )

    return ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        request_id=request_id,
    ).to_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


def _flatten_detail(data) -> str:
    """Reduce a DRF error payload to its first human-readable message."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for field_name, errors in data.items():
            first = errors[0] if isinstance(errors, list) and errors else errors
            if field_name == 'non_field_errors':
                return str(first)
            return f"{field_name}: {first}"
        return "Validation failed"
    if isinstance(data, list):
        return str(data[0]) if data else "Error"
    return str(data)
