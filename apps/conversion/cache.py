"""
Conversion cache.

ConversionCache owns the key scheme and the default TTL; the storage itself
is a TTLCache collaborator. DatabaseTTLCache keeps entries in the
CachedConversion table and enforces expiry at read time, so an entry past
its expiry reads as absent whether or not it has been purged yet.
"""

import logging
import re
from datetime import timedelta
from typing import Optional, Protocol

from django.utils import timezone

from .models import CachedConversion

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60
AP_NAMESPACE_PATTERN = 'ap_conversion_*'


def glob_to_regex(pattern: str) -> str:
    """Translate a ``*`` glob into an anchored regex."""
    return '^' + '.*'.join(re.escape(part) for part in pattern.split('*')) + '$'


class TTLCache(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: int) -> None:
        ...

    def delete_matching(self, pattern: str) -> int:
        ...

    def purge_expired(self) -> int:
        ...


class DatabaseTTLCache:
    """TTL key-value store backed by the CachedConversion table."""

    def get(self, key: str) -> Optional[str]:
        entry = CachedConversion.objects.live().filter(key=key).only('content').first()
        return entry.content if entry else None

    def set(self, key: str, value: str, ttl: int) -> None:
        CachedConversion.objects.update_or_create(
            key=key,
            defaults={
                'content': value,
                'expires_at': timezone.now() + timedelta(seconds=ttl),
            },
        )

    def delete_matching(self, pattern: str) -> int:
        deleted, _ = CachedConversion.objects.filter(key__regex=glob_to_regex(pattern)).delete()
        return deleted

    def purge_expired(self) -> int:
        deleted, _ = CachedConversion.objects.expired().delete()
        return deleted


class ConversionCache:
    """
    Per-article conversion cache.

    Usage:
        cache = ConversionCache()
        key = ConversionCache.key_for(42)        # "ap_conversion_42"
        cache.set(key, html)
        cache.get(key)
        cache.clear()                           # every ap entry
    """

    def __init__(self, backend: Optional[TTLCache] = None, ttl: int = DEFAULT_TTL):
        self.backend = backend or DatabaseTTLCache()
        self.ttl = ttl

    @staticmethod
    def key_for(article_id: int, fmt: str = 'ap') -> str:
        return f"{fmt}_conversion_{article_id}"

    def get(self, key: str) -> Optional[str]:
        return self.backend.get(key)

    def set(self, key: str, content: str, ttl: Optional[int] = None) -> None:
        self.backend.set(key, content, ttl if ttl is not None else self.ttl)
        logger.debug("Cached %s for %ss", key, ttl if ttl is not None else self.ttl)

    def clear(self, pattern: str = AP_NAMESPACE_PATTERN) -> int:
        """Remove every entry whose key matches ``pattern``, expired or not."""
        deleted = self.backend.delete_matching(pattern)
        logger.info("Cleared %d cached conversions matching %s", deleted, pattern)
        return deleted

    def purge_expired(self) -> int:
        deleted = self.backend.purge_expired()
        if deleted:
            logger.info("Purged %d expired conversions", deleted)
        return deleted
