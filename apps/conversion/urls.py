"""
Conversion API URLs.
"""

from django.urls import path
from .views import ConvertArticleView, ClearConversionCacheView

app_name = 'conversion'

urlpatterns = [
    path('convert/', ConvertArticleView.as_view(), name='convert'),
    path('cache/clear/', ClearConversionCacheView.as_view(), name='cache-clear'),
]
