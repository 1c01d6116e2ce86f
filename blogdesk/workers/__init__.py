import asyncio

from celery import Celery
from celery.schedules import crontab

from blogdesk.core.config import settings
from blogdesk.core.logging_config import setup_logging

setup_logging()

_loop = None


def worker_loop() -> asyncio.AbstractEventLoop:
    """Return the event loop shared by every async task body.

    The asyncpg pool binds to the loop it was created on, so tasks must not
    spin up a fresh loop per run.
    """
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop


celery_app = Celery(
    "blogdesk_worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_hijack_root_logger=False,
    beat_schedule={
        "purge-read-notifications-daily": {
            "task": "purge_read_notifications",
            "schedule": crontab(minute=0, hour=0),
        },
    },
)

# Register tasks with the celery app
import blogdesk.workers.notifications  # noqa: F401, E402
