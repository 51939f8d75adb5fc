"""
Rate Limiting / Throttling for the Format Converter.

Usage in views:
    from apps.core.throttling import ConversionRateThrottle

    class ConvertArticleView(APIView):
        throttle_classes = [ConversionRateThrottle]

Usage in settings:
    REST_FRAMEWORK = {
        'DEFAULT_THROTTLE_RATES': {
            'conversion': '30/minute',
        }
    }
"""

from rest_framework.throttling import AnonRateThrottle
import logging

logger = logging.getLogger(__name__)


class ConversionRateThrottle(AnonRateThrottle):
    """
    Throttle for the public conversion endpoint, keyed per client address.

    Each AP conversion can cost an upstream call, so visitors share a budget
    whether or not they are logged in.

    Default: 30 requests/minute
    """
    scope = 'conversion'

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }

    def get_rate(self):
        """Get rate from settings or use default."""
        try:
            return super().get_rate()
        except Exception:
            return '30/minute'

    def throttle_failure(self):
        logger.warning("Conversion rate limit exceeded (%s)", self.rate)
        return False
