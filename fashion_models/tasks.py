"""
Celery tasks for the Fashion Model catalog
"""
import logging

from celery import shared_task

from tryon.services.container import get_services

logger = logging.getLogger(__name__)


@shared_task
def refresh_recent_usage_async():
    """Periodic decay of the recent-usage window (scheduled in thrift_studio.celery)."""
    changed = get_services().catalog.refresh_recent_usage()
    logger.info("[CELERY] Recent usage refreshed for %d fashion models", changed)
    return {'changed': changed}
