"""
Article page URLs.
"""

from django.urls import path
from .views import ArticleDetailView

app_name = 'articles'

urlpatterns = [
    path('<int:pk>/', ArticleDetailView.as_view(), name='article-detail'),
]
