"""Deferred deletion of media the request path failed to clean up."""
import asyncio
import logging

from catalog.config import get_settings
from catalog.exceptions import MediaError
from catalog.services.media_store import CloudinaryMediaStore
from catalog.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


async def _delete_media(key: str) -> None:
    store = CloudinaryMediaStore.from_settings(get_settings())
    try:
        await store.delete(key)
    finally:
        await store.close()


@celery_app.task(bind=True, max_retries=3, ignore_result=True)
def purge_media(self, key: str):
    """
    Delete one media object by key.

    Args:
        key: Public id derived from the media URL
    """
    try:
        asyncio.run(_delete_media(key))
    except MediaError as exc:
        logger.error("Media purge failed for %s: %s", key, exc)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    logger.info("Purged orphaned media %s", key)


def schedule_media_purge(key: str) -> None:
    """Queue ``purge_media`` for key; a broker outage is logged, not raised."""
    try:
        purge_media.delay(key)
    except Exception:
        logger.error("Could not queue media purge for %s; it is now orphaned", key, exc_info=True)
