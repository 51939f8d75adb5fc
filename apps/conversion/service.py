"""
Conversion service.

Turns an article into one of the supported display formats:

- ``original``: the stored body through the content renderer. Never cached.
- ``ap``: an AP style rewrite from the text-generation API, cached per
  article for the configured TTL.

Failures are raised as ConversionError subclasses and are never cached.
Concurrent misses for the same article may both reach the API; the last
successful write wins.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from apps.articles.rendering import ContentRenderer, DefaultContentRenderer, ensure_html
from apps.articles.store import ArticleStore, DatabaseArticleStore
from apps.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from apps.core.observability import metrics, record_conversion_metrics

from .cache import ConversionCache
from .config import ConverterConfig
from .llm import OpenAIChatClient, TextGenerationClient, strip_code_fences
from .prompts import build_ap_prompt

logger = logging.getLogger(__name__)

FORMAT_ORIGINAL = 'original'
FORMAT_AP = 'ap'
SUPPORTED_FORMATS = (FORMAT_ORIGINAL, FORMAT_AP)


@dataclass(frozen=True)
class ConversionResult:
    content: str
    format: str
    cached: bool = False


class ConversionService:
    """
    Convert articles between display formats.

    All collaborators are injected; ``generator`` is built from the config
    on first use when not given.
    """

    def __init__(
        self,
        config: ConverterConfig,
        articles: Optional[ArticleStore] = None,
        renderer: Optional[ContentRenderer] = None,
        cache: Optional[ConversionCache] = None,
        generator: Optional[TextGenerationClient] = None,
    ):
        self.config = config
        self.articles = articles or DatabaseArticleStore()
        self.renderer = renderer or DefaultContentRenderer()
        self.cache = cache or ConversionCache(ttl=config.cache_ttl)
        self._generator = generator

    @classmethod
    def default(cls) -> 'ConversionService':
        """Service wired with the effective configuration and default stores."""
        return cls(ConverterConfig.load())

    @property
    def generator(self) -> TextGenerationClient:
        if self._generator is None:
            self._generator = OpenAIChatClient.from_config(self.config)
        return self._generator

    def convert(self, article_id: int, fmt: str) -> ConversionResult:
        """
        Convert one article.

        Raises:
            NotFoundError: the article does not exist (checked before any cache access).
            ValidationError: ``fmt`` is not a supported format.
            ConfigurationError: no API key for an uncached ``ap`` conversion.
            UpstreamError: the text-generation call failed or timed out.
        """
        article = self.articles.get(article_id)
        if article is None:
            raise NotFoundError()

        if fmt not in SUPPORTED_FORMATS:
            raise ValidationError("Invalid format requested", code=ErrorCode.INVALID_FORMAT)

        if fmt == FORMAT_ORIGINAL:
            record_conversion_metrics(fmt, 'rendered')
            return ConversionResult(content=self.renderer.render(article.body), format=fmt)

        return self._convert_ap(article)

    def _convert_ap(self, article) -> ConversionResult:
        key = ConversionCache.key_for(article.pk, FORMAT_AP)

        cached = self.cache.get(key)
        if cached is not None:
            record_conversion_metrics(FORMAT_AP, 'hit')
            logger.debug("Cache hit for %s", key)
            return ConversionResult(content=cached, format=FORMAT_AP, cached=True)

        record_conversion_metrics(FORMAT_AP, 'miss')

        if not self.config.has_credentials:
            raise ConfigurationError()

        prompt = build_ap_prompt(article.title, article.body)

        try:
            with metrics.timer('conversion.ap', tags={'model': self.config.model}):
                raw = self.generator.generate(prompt, self.config.model)
        except UpstreamError as exc:
            record_conversion_metrics(FORMAT_AP, 'failed')
            logger.warning("AP conversion failed for article %s: %s", article.pk, exc)
            raise

        content = ensure_html(strip_code_fences(raw))
        if not content:
            record_conversion_metrics(FORMAT_AP, 'failed')
            logger.warning("AP conversion returned no content for article %s", article.pk)
            raise UpstreamError("Empty content from API")

        self.cache.set(key, content)
        logger.info("Converted article %s to AP style with %s", article.pk, self.config.model)
        return ConversionResult(content=content, format=FORMAT_AP)
