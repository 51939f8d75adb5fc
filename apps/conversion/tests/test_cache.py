"""
Tests for the conversion cache and its database backend.
"""

import pytest
from datetime import timedelta
from django.utils import timezone

from apps.conversion.cache import (
    ConversionCache,
    DatabaseTTLCache,
    glob_to_regex,
)
from apps.conversion.models import CachedConversion


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def cache(db):
    return ConversionCache()


def _expire(key):
    CachedConversion.objects.filter(key=key).update(
        expires_at=timezone.now() - timedelta(seconds=1)
    )


# ============================================================================
# Key Scheme Tests
# ============================================================================

class TestKeys:

    def test_key_for_ap(self):
        assert ConversionCache.key_for(42) == 'ap_conversion_42'

    def test_key_for_other_format(self):
        assert ConversionCache.key_for(42, 'original') == 'original_conversion_42'

    def test_glob_to_regex(self):
        assert glob_to_regex('ap_conversion_*') == '^ap_conversion_.*$'
        assert glob_to_regex('a.b*') == r'^a\.b.*$'
        assert glob_to_regex('exact') == '^exact$'


# ============================================================================
# Cache Tests
# ============================================================================

@pytest.mark.django_db
class TestConversionCache:
    """TTL is enforced on read; clears cover the whole AP namespace."""

    def test_get_missing(self, cache):
        assert cache.get('ap_conversion_1') is None

    def test_set_then_get(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>')
        assert cache.get('ap_conversion_1') == '<p>one</p>'

    def test_overwrite_keeps_single_row(self, cache):
        cache.set('ap_conversion_1', '<p>old</p>')
        cache.set('ap_conversion_1', '<p>new</p>')

        assert cache.get('ap_conversion_1') == '<p>new</p>'
        assert CachedConversion.objects.filter(key='ap_conversion_1').count() == 1

    def test_expired_reads_as_absent(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>')
        _expire('ap_conversion_1')

        assert cache.get('ap_conversion_1') is None
        # Still physically present until purged
        assert CachedConversion.objects.filter(key='ap_conversion_1').exists()

    def test_set_revives_expired_entry(self, cache):
        cache.set('ap_conversion_1', '<p>old</p>')
        _expire('ap_conversion_1')
        cache.set('ap_conversion_1', '<p>new</p>')

        assert cache.get('ap_conversion_1') == '<p>new</p>'

    def test_explicit_ttl(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>', ttl=30)

        entry = CachedConversion.objects.get(key='ap_conversion_1')
        assert entry.expires_at <= timezone.now() + timedelta(seconds=30)

    def test_clear_removes_ap_namespace_only(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>')
        cache.set('ap_conversion_2', '<p>two</p>')
        _expire('ap_conversion_2')
        cache.set('other_conversion_1', '<p>keep</p>')

        deleted = cache.clear()

        assert deleted == 2
        assert list(CachedConversion.objects.values_list('key', flat=True)) == ['other_conversion_1']

    def test_clear_with_pattern(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>')
        cache.set('ap_conversion_10', '<p>ten</p>')

        assert cache.clear('ap_conversion_1') == 1
        assert cache.get('ap_conversion_10') == '<p>ten</p>'

    def test_clear_empty(self, cache):
        assert cache.clear() == 0

    def test_purge_expired(self, cache):
        cache.set('ap_conversion_1', '<p>one</p>')
        cache.set('ap_conversion_2', '<p>two</p>')
        _expire('ap_conversion_1')

        assert cache.purge_expired() == 1
        assert list(CachedConversion.objects.values_list('key', flat=True)) == ['ap_conversion_2']

    def test_injected_backend(self):
        class DictBackend:
            def __init__(self):
                self.store = {}

            def get(self, key):
                return self.store.get(key)

            def set(self, key, value, ttl):
                self.store[key] = (value, ttl)

            def delete_matching(self, pattern):
                count = len(self.store)
                self.store.clear()
                return count

            def purge_expired(self):
                return 0

        backend = DictBackend()
        cache = ConversionCache(backend=backend, ttl=120)
        cache.set('ap_conversion_5', '<p>five</p>')

        assert backend.store['ap_conversion_5'] == ('<p>five</p>', 120)
        assert cache.clear() == 1


@pytest.mark.django_db
class TestCachedConversionModel:

    def test_is_expired(self):
        entry = CachedConversion.objects.create(
            key='ap_conversion_1',
            content='<p>x</p>',
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        assert entry.is_expired
        assert str(entry) == 'ap_conversion_1'

    def test_live_and_expired_querysets(self):
        now = timezone.now()
        CachedConversion.objects.create(key='a', content='', expires_at=now + timedelta(hours=1))
        CachedConversion.objects.create(key='b', content='', expires_at=now - timedelta(hours=1))

        assert list(CachedConversion.objects.live().values_list('key', flat=True)) == ['a']
        assert list(CachedConversion.objects.expired().values_list('key', flat=True)) == ['b']

    def test_database_backend_is_default(self):
        assert isinstance(ConversionCache().backend, DatabaseTTLCache)
