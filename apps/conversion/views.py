"""
Conversion API views.

POST /api/conversion/convert/       - Convert an article (public, request token required)
POST /api/conversion/cache/clear/   - Clear cached AP conversions (admin only)
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import HasRequestToken, IsAdmin
from apps.core.throttling import ConversionRateThrottle

from .cache import ConversionCache
from .serializers import (
    ClearCacheResponseSerializer,
    ConvertRequestSerializer,
    ConvertResponseSerializer,
)
from .service import ConversionService

logger = logging.getLogger(__name__)


class ConvertArticleView(APIView):
    """
    Convert an article to the requested display format.

    The request token is checked before the body is read; errors come back
    as ``{"error": message}`` with a status per error kind.
    """
    permission_classes = [HasRequestToken]
    throttle_classes = [ConversionRateThrottle]

    def get_service(self) -> ConversionService:
        return ConversionService.default()

    def post(self, request):
        serializer = ConvertRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        article_id = serializer.validated_data['article_id']
        fmt = serializer.validated_data['format']

        result = self.get_service().convert(article_id, fmt)
        logger.info(
            "Served article %s as %s (cached=%s)", article_id, result.format, result.cached,
        )

        data = ConvertResponseSerializer({'content': result.content, 'format': result.format}).data
        return Response(data, status=status.HTTP_200_OK)


class ClearConversionCacheView(APIView):
    """
    Remove every cached AP conversion together with its expiry marker.
    """
    permission_classes = [HasRequestToken, IsAdmin]

    def post(self, request):
        deleted = ConversionCache().clear()
        logger.info("Conversion cache cleared by %s (%d entries)", request.user, deleted)

        data = ClearCacheResponseSerializer({'message': 'Cache cleared', 'deleted': deleted}).data
        return Response(data, status=status.HTTP_200_OK)
