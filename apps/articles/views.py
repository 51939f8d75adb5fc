"""
Article page views.

The page carries the conversion widget and the original content the
client restores when reverting.
"""

import logging

from django.conf import settings
from django.shortcuts import get_object_or_404, render
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie

from .models import Article
from .rendering import DefaultContentRenderer

logger = logging.getLogger(__name__)


def client_timeout() -> int:
    """Seconds the page's client waits; always above the upstream timeout."""
    return max(
        settings.FORMAT_CONVERTER_CLIENT_TIMEOUT,
        settings.FORMAT_CONVERTER_TIMEOUT + 5,
    )


@method_decorator(ensure_csrf_cookie, name='dispatch')
class ArticleDetailView(View):
    """
    GET /articles/<id>/ - Render an article with the format toggle.

    Sets the CSRF cookie that conversion calls must echo back.
    """

    template_name = 'articles/article_detail.html'
    renderer = DefaultContentRenderer()

    def get(self, request, pk):
        article = get_object_or_404(Article, pk=pk)
        content = self.renderer.render(article.body)

        return render(request, self.template_name, {
            'article': article,
            'content': content,
            'client_timeout': client_timeout(),
        })
