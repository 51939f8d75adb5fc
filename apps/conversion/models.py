"""
Cached conversion model.

One row per cache key; the expiry timestamp lives on the row, so deleting
an entry also removes its expiry marker.
"""

from django.db import models
from django.utils import timezone

from apps.core.models import TimeStampedModel


class CachedConversionQuerySet(models.QuerySet):

    def live(self, now=None):
        return self.filter(expires_at__gt=now or timezone.now())

    def expired(self, now=None):
        return self.filter(expires_at__lte=now or timezone.now())


class CachedConversion(TimeStampedModel):
    """
    A stored conversion result, e.g. key ``ap_conversion_42``.

    Rows are replaced on every successful conversion and never hold
    failures.
    """

    key = models.CharField(
        max_length=191,
        unique=True,
        verbose_name='Key',
        help_text='Cache key, e.g. ap_conversion_<article id>'
    )

    content = models.TextField(
        verbose_name='Content',
        help_text='Converted HTML'
    )

    expires_at = models.DateTimeField(
        db_index=True,
        verbose_name='Expires At',
        help_text='Entry reads as absent from this moment on'
    )

    objects = CachedConversionQuerySet.as_manager()

    class Meta(TimeStampedModel.Meta):
        db_table = 'cached_conversions'
        verbose_name = 'Cached Conversion'
        verbose_name_plural = 'Cached Conversions'
        permissions = [
            ('clear_conversion_cache', 'Can clear the conversion cache'),
        ]

    def __str__(self):
        return self.key

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()
