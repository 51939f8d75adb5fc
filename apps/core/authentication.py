"""
Session authentication that reports request-token failures as AuthError.

DRF's SessionAuthentication raises a generic PermissionDenied when a
logged-in user's request fails the CSRF check; this keeps the error code the
same as for anonymous callers rejected by HasRequestToken.
"""

import logging

from rest_framework import exceptions
from rest_framework.authentication import SessionAuthentication

logger = logging.getLogger(__name__)


class RequestTokenSessionAuthentication(SessionAuthentication):

    def enforce_csrf(self, request):
        # Imported here: DRF loads this class while apps.core.exceptions
        # is still importing rest_framework.views.
        from apps.core.exceptions import AuthError

        try:
            super().enforce_csrf(request)
        except exceptions.PermissionDenied as exc:
            logger.info("Rejected request token: %s", exc.detail)
            raise AuthError() from exc
