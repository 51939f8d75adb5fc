"""
Request ID Middleware for the Format Converter.

Generates and propagates unique request IDs so a conversion can be followed
from the visitor's click through the upstream call in the logs.

Usage:
    MIDDLEWARE = [
        ...
        'apps.core.middleware.RequestIDMiddleware',
    ]

Access request ID in views:
    from apps.core.middleware import get_request_id
"""

import uuid
import threading
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

# Thread-local storage for request context
_request_context = threading.local()


def get_request_id():
    """
    Get the current request ID from thread-local storage.

    Returns None if called outside of a request context.
    """
    return getattr(_request_context, 'request_id', None)


def set_request_context(request_id, path=None):
    """Set request context in thread-local storage (also used by Celery tasks)."""
    _request_context.request_id = request_id
    _request_context.path = path


def clear_request_context():
    """Clear request context from thread-local storage."""
    _request_context.request_id = None
    _request_context.path = None


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to handle request IDs for tracing.

    Flow:
    1. Check for incoming X-Request-ID header
    2. Generate new UUID if absent or malformed
    3. Store in thread-local and on request.request_id
    4. Echo it in the response headers
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER)

        if request_id:
            try:
                uuid.UUID(request_id)
            except (ValueError, TypeError):
                request_id = str(uuid.uuid4())
        else:
            request_id = str(uuid.uuid4())

        set_request_context(request_id, path=request.path)
        request.request_id = request_id
        return None

    def process_response(self, request, response):
        request_id = getattr(request, 'request_id', None)

        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        clear_request_context()
        return response


class RequestIDFilter(logging.Filter):
    """Logging filter that adds request_id to log records."""

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        return True


def setup_celery_request_context(headers):
    """Set up request context in a Celery task from its headers."""
    request_id = headers.get('request_id')
    set_request_context(request_id or str(uuid.uuid4()))
