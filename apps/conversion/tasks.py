"""
Celery tasks for conversion cache maintenance.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2, soft_time_limit=120)
def purge_expired_conversions(self):
    """
    Physically delete expired cache rows.

    Expired rows already read as absent; this only reclaims space.

    Returns:
        Dict with the number of rows deleted
    """
    from apps.conversion.cache import ConversionCache

    try:
        deleted = ConversionCache().purge_expired()
    except Exception as exc:
        logger.error("Purging expired conversions failed: %s", exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    logger.info("Purged %d expired conversions", deleted)
    return {"deleted": deleted}
