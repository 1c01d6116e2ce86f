import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.core.errors import NotFoundError, ValidationError
from blogdesk.models.engagement import Like
from blogdesk.models.post import Post
from blogdesk.models.user import User
from blogdesk.services import realtime

logger = logging.getLogger(__name__)


async def record_view(db: AsyncSession, slug: str) -> int:
    """Atomically bump a published post's view counter and return the new value."""
    result = await db.execute(
        update(Post)
        .where(Post.slug == slug, Post.published.is_(True))
        .values(views=Post.views + 1)
        .returning(Post.views)
        .execution_options(synchronize_session=False)
    )
    views = result.scalar_one_or_none()
    if views is None:
        raise NotFoundError("Post not found")
    await db.commit()
    return views


async def count_likes(db: AsyncSession, post_id: int) -> int:
    result = await db.execute(select(func.count(Like.id)).where(Like.post_id == post_id))
    return result.scalar() or 0


async def toggle_like(db: AsyncSession, user: User, post_id: int) -> tuple[bool, int]:
    """Like or unlike a published post.

    Returns ``(liked, like_count)`` and pushes the new count to realtime
    subscribers.
    """
    result = await db.execute(
        select(Post).where(Post.id == post_id, Post.published.is_(True))
    )
    post = result.scalar_one_or_none()
    if post is None:
        raise ValidationError("Post is not published yet.")

    result = await db.execute(
        select(Like).where(Like.post_id == post_id, Like.user_id == user.id)
    )
    existing = result.scalar_one_or_none()

    if existing is not None:
        await db.delete(existing)
        liked = False
    else:
        db.add(Like(post_id=post_id, user_id=user.id))
        liked = True

    await db.commit()
    like_count = await count_likes(db, post_id)
    await realtime.push_like_count(post_id, like_count)

    logger.info(
        "Like toggled",
        extra={"post_id": post_id, "user_id": user.id, "liked": liked, "like_count": like_count},
    )
    return liked, like_count
