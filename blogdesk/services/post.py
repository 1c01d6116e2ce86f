import logging
import math
import re
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from blogdesk.api.schemas import PostCreate, PostUpdate
from blogdesk.core.errors import NotFoundError, ValidationError
from blogdesk.models.engagement import Comment, Reply
from blogdesk.models.post import Category, Post, Tag
from blogdesk.models.user import Role, User

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9\s-]", "", text).strip().lower()
    return re.sub(r"[\s-]+", "-", slug).strip("-")


def reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words a minute, never below one."""
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


def _label(value: str) -> str:
    return value[:1].upper() + value[1:]


async def _get_or_create_category(db: AsyncSession, name: str) -> Category:
    value = name.strip().lower()
    result = await db.execute(select(Category).where(Category.value == value))
    category = result.scalar_one_or_none()
    if category is None:
        category = Category(label=_label(name.strip()), value=value)
        db.add(category)
    return category


async def _get_or_create_tags(db: AsyncSession, names: list[str]) -> list[Tag]:
    wanted: dict[str, str] = {}
    for name in names:
        name = name.strip()
        if name:
            wanted.setdefault(name.lower(), _label(name))

    result = await db.execute(select(Tag).where(Tag.value.in_(list(wanted))))
    by_value = {tag.value: tag for tag in result.scalars().all()}
    tags = []
    for value, label in wanted.items():
        tag = by_value.get(value)
        if tag is None:
            tag = Tag(label=label, value=value)
            db.add(tag)
        tags.append(tag)
    return tags


async def _unique_slug(db: AsyncSession, wanted: str, exclude_post_id: int | None = None) -> str:
    """Return ``wanted`` or the first free ``wanted-N``."""
    base = slugify(wanted) or "post"
    stmt = select(Post.slug).where(Post.slug.like(f"{base}%"))
    if exclude_post_id is not None:
        stmt = stmt.where(Post.id != exclude_post_id)
    taken = set((await db.execute(stmt)).scalars().all())

    slug, count = base, 1
    while slug in taken:
        slug = f"{base}-{count}"
        count += 1
    return slug


async def _get_owned_post(db: AsyncSession, user: User, post_id: int, *, with_tags: bool = False) -> Post:
    stmt = select(Post).where(Post.id == post_id)
    if with_tags:
        stmt = stmt.options(selectinload(Post.tags))
    post = (await db.execute(stmt)).scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found")
    if post.author_id != user.id and user.role != Role.ADMIN:
        raise ValidationError("You are not an author of this post.")
    return post


async def create_post(db: AsyncSession, author: User, data: PostCreate) -> Post:
    category = await _get_or_create_category(db, data.category)
    tags = await _get_or_create_tags(db, data.tags)
    slug = await _unique_slug(db, data.slug or data.title)

    post = Post(
        title=data.title,
        slug=slug,
        description=data.description,
        content=data.content,
        featured_image=data.featured_image,
        min_read=reading_time(data.content),
        author_id=author.id,
        category=category,
        tags=tags,
    )
    if data.publish:
        post.published = True
        post.published_at = datetime.now(timezone.utc)
    db.add(post)
    await db.commit()
    await db.refresh(post, attribute_names=["tags", "category"])

    logger.info("Post created", extra={"post_id": post.id, "author_id": author.id, "published": post.published})
    return post


async def publish_post(db: AsyncSession, user: User, post_id: int) -> Post:
    post = await _get_owned_post(db, user, post_id)
    if not post.published:
        post.published = True
        post.published_at = datetime.now(timezone.utc)
        await db.commit()
        logger.info("Post published", extra={"post_id": post.id})
    return post


async def update_post(db: AsyncSession, user: User, post_id: int, data: PostUpdate) -> Post:
    """Replace a post's content, category and tags. Reading time is recomputed."""
    post = await _get_owned_post(db, user, post_id, with_tags=True)

    post.category = await _get_or_create_category(db, data.category)
    post.tags = await _get_or_create_tags(db, data.tags)
    if data.slug and slugify(data.slug) != post.slug:
        post.slug = await _unique_slug(db, data.slug, exclude_post_id=post.id)
    post.title = data.title
    post.description = data.description
    post.content = data.content
    post.featured_image = data.featured_image
    post.min_read = reading_time(data.content)

    await db.commit()
    await db.refresh(post, attribute_names=["tags", "category"])
    logger.info("Post updated", extra={"post_id": post.id})
    return post


async def delete_post(db: AsyncSession, user: User, post_id: int) -> None:
    """Delete a post; likes, comments, replies and tag links go with it."""
    post = await _get_owned_post(db, user, post_id)
    # Children are removed by the ON DELETE CASCADE foreign keys
    await db.execute(delete(Post).where(Post.id == post.id).execution_options(synchronize_session=False))
    await db.commit()
    logger.info("Post deleted", extra={"post_id": post_id, "user_id": user.id})


async def list_categories(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(Category.id, Category.label, Category.value, func.count(Post.id))
        .outerjoin(Post, Post.category_id == Category.id)
        .group_by(Category.id, Category.label, Category.value)
        .order_by(Category.label)
    )
    return [
        {"id": cid, "label": label, "value": value, "post_count": count}
        for cid, label, value, count in result.all()
    ]


async def add_comment(db: AsyncSession, user: User, slug: str, content: str) -> Comment:
    if not content.strip():
        raise ValidationError("Comment is empty")
    result = await db.execute(select(Post.id).where(Post.slug == slug, Post.published.is_(True)))
    post_id = result.scalar_one_or_none()
    if post_id is None:
        raise NotFoundError("Post not found")

    comment = Comment(content=content, post_id=post_id, user_id=user.id)
    db.add(comment)
    await db.commit()
    return comment


async def add_reply(db: AsyncSession, user: User, comment_id: int, content: str) -> Reply:
    if not content.strip():
        raise ValidationError("Comment is empty")
    result = await db.execute(select(Comment.id).where(Comment.id == comment_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Comment not found")

    reply = Reply(content=content, comment_id=comment_id, user_id=user.id)
    db.add(reply)
    await db.commit()
    return reply
