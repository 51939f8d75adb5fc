"""
Article lookup used by the conversion service.
"""

from typing import Optional, Protocol

from .models import Article


class ArticleStore(Protocol):
    def get(self, article_id: int) -> Optional[Article]:
        ...


class DatabaseArticleStore:
    """Fetch articles from the database by primary key."""

    def get(self, article_id: int) -> Optional[Article]:
        return Article.objects.filter(pk=article_id).first()
