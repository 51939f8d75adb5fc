"""
Permissions for the Format Converter API.

Two gates exist:
- the per-session request token (Django's CSRF token) that every conversion
  call must carry, checked before any business logic runs;
- the administrator gate for destructive operations such as clearing the
  conversion cache.

Usage:
    from apps.core.permissions import HasRequestToken, IsAdmin

    class MyView(APIView):
        permission_classes = [HasRequestToken, IsAdmin]
"""

import logging

from rest_framework.authentication import CSRFCheck
from rest_framework.permissions import BasePermission

from apps.core.exceptions import AuthError

logger = logging.getLogger(__name__)


class HasRequestToken(BasePermission):
    """
    Require a valid request token for anonymous and authenticated callers alike.

    DRF exempts APIViews from CSRF and only re-applies it for session-authenticated
    users; public endpoints need it for anonymous visitors too.
    """

    def has_permission(self, request, view):
        check = CSRFCheck(lambda req: None)
        django_request = request._request
        check.process_request(django_request)
        reason = check.process_view(django_request, None, (), {})
        if reason:
            logger.info("Rejected request token: %s", reason)
            raise AuthError()
        return True


class IsAdmin(BasePermission):
    """
    Allow access to administrators only.

    Superusers always pass; other staff need the explicit
    ``conversion.clear_conversion_cache`` permission.
    """
    message = "Admin access required."
    required_permission = 'conversion.clear_conversion_cache'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if user.is_superuser:
            return True

        return user.is_staff and user.has_perm(self.required_permission)
