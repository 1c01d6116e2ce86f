"""Nightly cleanup of read notifications."""

import logging

from blogdesk.core.config import settings
from blogdesk.db.session import async_session_factory
from blogdesk.services import notification as notification_svc
from blogdesk.workers import celery_app, worker_loop

logger = logging.getLogger(__name__)


@celery_app.task(name="purge_read_notifications")
def purge_read_notifications() -> int:
    """Delete read notifications older than the retention period.

    A failed run is logged and left for the next scheduled tick.
    """

    async def _run() -> int:
        async with async_session_factory() as db:
            deleted = await notification_svc.purge_read_notifications(
                db, settings.notification_retention_days
            )
        logger.info("Purged %d read notifications", deleted)
        return deleted

    try:
        return worker_loop().run_until_complete(_run())
    except Exception:
        logger.exception("purge_read_notifications failed")
        return 0
