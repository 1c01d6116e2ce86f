import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from blogdesk.core.config import settings
from blogdesk.core.errors import NotFoundError
from blogdesk.models.notification import Notification

logger = logging.getLogger(__name__)

AUTHOR_REQUEST_TITLE = "Author request"


async def create_notification(
    db: AsyncSession, *, title: str, message: str, user_id: int | None = None
) -> Notification:
    """Stage a notification on the session; the caller commits."""
    notification = Notification(title=title, message=message, user_id=user_id)
    db.add(notification)
    await db.flush()
    return notification


async def list_notifications(db: AsyncSession) -> list[Notification]:
    result = await db.execute(
        select(Notification)
        .options(selectinload(Notification.user))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def has_unread_for_user(db: AsyncSession, user_id: int, title: str) -> bool:
    result = await db.execute(
        select(Notification.id)
        .where(
            Notification.user_id == user_id,
            Notification.title == title,
            Notification.is_read.is_(False),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def mark_read(db: AsyncSession, notification_id: int) -> Notification:
    result = await db.execute(select(Notification).where(Notification.id == notification_id))
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    await db.commit()
    return notification


async def mark_all_read(db: AsyncSession) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount or 0


async def purge_read_notifications(
    db: AsyncSession,
    older_than_days: int = settings.notification_retention_days,
    now: datetime | None = None,
) -> int:
    """Delete read notifications last touched more than ``older_than_days`` ago."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=older_than_days)
    result = await db.execute(
        delete(Notification)
        .where(Notification.is_read.is_(True), Notification.updated_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount or 0
