"""
URL configuration for the Format Converter project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/conversion/', include('apps.conversion.urls')),
    # Article pages with the format toggle widget
    path('articles/', include('apps.articles.urls')),
    # Observability endpoints
    path('', include('apps.core.urls')),
]

# Customize admin site
admin.site.site_header = "Format Converter Administration"
admin.site.site_title = "Format Converter Admin"
admin.site.index_title = "Articles and cached conversions"
