"""
Article models for the Format Converter project.
The content store that conversions read from, keyed by article id.
"""

from django.db import models
from apps.core.models import TimeStampedModel


class Article(TimeStampedModel):
    """
    A published article that visitors can toggle into AP style.

    The body is stored as authored (HTML or plain text) and is never
    modified by a conversion.
    """

    title = models.CharField(
        max_length=500,
        verbose_name='Title',
        help_text='Article title'
    )

    body = models.TextField(
        verbose_name='Body',
        help_text='Article content as authored (HTML or plain text)'
    )

    class Meta(TimeStampedModel.Meta):
        db_table = 'articles'
        verbose_name = 'Article'
        verbose_name_plural = 'Articles'

    def __str__(self):
        return f"{self.title[:50]}..." if len(self.title) > 50 else self.title

    @property
    def word_count(self) -> int:
        from apps.articles.rendering import strip_tags
        return len(strip_tags(self.body).split())
