import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.core.config import settings
from blogdesk.core.errors import NotFoundError, ValidationError
from blogdesk.models.user import Role, User
from blogdesk.services import mailer
from blogdesk.services.notification import (
    AUTHOR_REQUEST_TITLE,
    create_notification,
    has_unread_for_user,
)
from blogdesk.services.site import get_site_settings

logger = logging.getLogger(__name__)

AUTHOR_REQUEST_REASON = (
    "I am passionate about writing and want to share my expertise with the readers "
    "of this blog. I would love the opportunity to inspire and educate others "
    "through the platform."
)


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def _site_name(db: AsyncSession) -> str:
    site = await get_site_settings(db)
    return site["site_name"] if site else settings.app_name


async def request_author_role(db: AsyncSession, user: User, reason: str | None = None) -> None:
    """Record an author request for the admins and email the admin inbox.

    A user whose previous author request is still unread is turned away.
    """
    if user.role in (Role.AUTHOR, Role.ADMIN):
        raise ValidationError("You already have author access.")
    if await has_unread_for_user(db, user.id, AUTHOR_REQUEST_TITLE):
        raise ValidationError("Already requested. Please wait 24 hours.")

    await create_notification(
        db,
        title=AUTHOR_REQUEST_TITLE,
        message=f"You have a new author request by {user.name}",
        user_id=user.id,
    )
    await db.commit()

    await mailer.send_email(
        settings.admin_email,
        "author-request",
        site_name=await _site_name(db),
        name=user.name,
        email=user.email,
        reason=reason or AUTHOR_REQUEST_REASON,
    )
    logger.info("Author request submitted", extra={"user_id": user.id})


async def update_role(db: AsyncSession, user_id: int, role: Role) -> User:
    """Change a user's role. Granting author access emails the user."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    previous = user.role
    user.role = role
    await db.commit()

    if role == Role.AUTHOR and previous != Role.AUTHOR:
        await mailer.send_email(
            user.email,
            "author-approved",
            site_name=await _site_name(db),
            name=user.name,
        )
    logger.info("Role updated", extra={"user_id": user.id, "role": role.value})
    return user
