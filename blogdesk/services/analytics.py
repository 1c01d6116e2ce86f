import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.core.config import settings
from blogdesk.models.engagement import Comment, Like, Reply
from blogdesk.models.post import Category, Post
from blogdesk.models.user import User
from blogdesk.services import metrics
from blogdesk.services.metrics import UNCATEGORIZED, Window

logger = logging.getLogger(__name__)


def _in_window(column, window: Window):
    return column.between(window.start, window.end)


async def _scalar(db: AsyncSession, stmt) -> int:
    result = await db.execute(stmt)
    return result.scalar() or 0


async def _window_totals(
    db: AsyncSession,
    window: Window,
    author_id: int | None = None,
    include_users: bool = False,
) -> dict[str, int]:
    """Headline totals for one window via aggregate queries.

    Comments and likes are scoped through their post's author when
    ``author_id`` is given.
    """
    post_filters = [_in_window(Post.created_at, window)]
    if author_id is not None:
        post_filters.append(Post.author_id == author_id)

    def interactions(model):
        stmt = select(func.count(model.id)).where(_in_window(model.created_at, window))
        if author_id is not None:
            stmt = stmt.join(Post, model.post_id == Post.id).where(Post.author_id == author_id)
        return stmt

    totals = {
        "views": await _scalar(db, select(func.coalesce(func.sum(Post.views), 0)).where(*post_filters)),
        "comments": await _scalar(db, interactions(Comment)),
        "likes": await _scalar(db, interactions(Like)),
        "posts": await _scalar(db, select(func.count(Post.id)).where(*post_filters)),
    }
    if include_users:
        totals["users"] = await _scalar(
            db, select(func.count(User.id)).where(_in_window(User.created_at, window))
        )
    return totals


async def _fetch_window_rows(
    db: AsyncSession, window: Window, author_id: int | None = None
) -> tuple[list[dict], list[int], list[int]]:
    """Posts (most viewed first), comment post ids and like post ids in ``window``."""
    posts_stmt = (
        select(
            Post.id,
            Post.title,
            Post.slug,
            Post.featured_image,
            Post.views,
            Post.created_at,
            Category.label,
        )
        .outerjoin(Category, Post.category_id == Category.id)
        .where(_in_window(Post.created_at, window))
        .order_by(Post.views.desc(), Post.id)
    )
    comments_stmt = select(Comment.id, Comment.post_id).where(_in_window(Comment.created_at, window))
    likes_stmt = select(Like.id, Like.post_id).where(_in_window(Like.created_at, window))

    if author_id is not None:
        posts_stmt = posts_stmt.where(Post.author_id == author_id)
        comments_stmt = comments_stmt.join(Post, Comment.post_id == Post.id).where(
            Post.author_id == author_id
        )
        likes_stmt = likes_stmt.join(Post, Like.post_id == Post.id).where(
            Post.author_id == author_id
        )

    post_rows = (await db.execute(posts_stmt)).all()
    posts = [
        {
            "id": post_id,
            "title": title,
            "slug": slug,
            "featured_image": featured_image,
            "views": views,
            "category": label or UNCATEGORIZED,
            "created_at": created_at,
        }
        for post_id, title, slug, featured_image, views, created_at, label in post_rows
    ]
    comment_post_ids = [post_id for _id, post_id in (await db.execute(comments_stmt)).all()]
    like_post_ids = [post_id for _id, post_id in (await db.execute(likes_stmt)).all()]
    return posts, comment_post_ids, like_post_ids


def _categories(posts: list[dict], comment_post_ids: list[int], like_post_ids: list[int]) -> dict:
    percentages = metrics.category_percentages(
        (post["category"] for post in posts), limit=settings.analytics_category_limit
    )
    return {
        "category_percentages": percentages,
        "category_metrics": metrics.category_metrics(
            [row["name"] for row in percentages], posts, comment_post_ids, like_post_ids
        ),
    }


async def compute_author_report(
    db: AsyncSession,
    author_id: int,
    lookback_months: int = settings.analytics_default_months,
    now: datetime | None = None,
) -> dict:
    """Totals, category breakdown and period-over-period growth for one author."""
    current = Window.lookback(lookback_months, now)

    posts, comment_post_ids, like_post_ids = await _fetch_window_rows(db, current, author_id)
    totals = {
        "views": sum(post["views"] for post in posts),
        "comments": len(comment_post_ids),
        "likes": len(like_post_ids),
        "posts": len(posts),
    }
    prior = await _window_totals(db, current.prior(), author_id=author_id)

    logger.info(
        "Author report computed",
        extra={"author_id": author_id, "months": lookback_months, "posts": totals["posts"]},
    )
    return {
        "custom_time": lookback_months,
        "total_views": totals["views"],
        "total_comments": totals["comments"],
        "total_likes": totals["likes"],
        "total_posts": totals["posts"],
        "posts": posts,
        "growth": metrics.growth_block(totals, prior),
        **_categories(posts, comment_post_ids, like_post_ids),
    }


async def compute_platform_report(
    db: AsyncSession,
    lookback_months: int = settings.analytics_default_months,
    now: datetime | None = None,
) -> dict:
    """Platform-wide totals and growth, plus fixed 12-month view and user charts.

    Headline totals follow ``lookback_months``; the charts always cover
    ``settings.analytics_chart_months``.
    """
    current = Window.lookback(lookback_months, now)
    chart = Window.lookback(settings.analytics_chart_months, now)

    posts, comment_post_ids, like_post_ids = await _fetch_window_rows(db, current)
    users = await _scalar(
        db, select(func.count(User.id)).where(_in_window(User.created_at, current))
    )

    chart_posts = (
        await db.execute(
            select(Post.id, Post.title, Post.views, Post.created_at)
            .where(_in_window(Post.created_at, chart))
            .order_by(Post.created_at.asc(), Post.id)
        )
    ).all()
    chart_users = (
        await db.execute(select(User.created_at).where(_in_window(User.created_at, chart)))
    ).scalars().all()

    totals = {
        "views": sum(post["views"] for post in posts),
        "users": users,
        "likes": len(like_post_ids),
        "comments": len(comment_post_ids),
        "posts": len(posts),
    }
    prior = await _window_totals(db, current.prior(), include_users=True)

    logger.info(
        "Platform report computed",
        extra={"months": lookback_months, "posts": totals["posts"], "users": users},
    )
    return {
        "custom_time": lookback_months,
        "total_views": totals["views"],
        "total_users": totals["users"],
        "total_likes": totals["likes"],
        "total_comments": totals["comments"],
        "total_posts": totals["posts"],
        "views_chart": metrics.views_chart(chart_posts),
        "users_chart": metrics.users_chart(chart_users),
        "posts": posts,
        "growth": metrics.growth_block(totals, prior),
        **_categories(posts, comment_post_ids, like_post_ids),
    }


async def compute_detailed_post_report(db: AsyncSession, now: datetime | None = None) -> dict:
    """Per-post engagement and monthly buckets for posts of the last six months."""
    window = Window.lookback(settings.analytics_detail_months, now)
    in_range = Post.created_at >= window.start

    posts = (
        await db.execute(
            select(Post.id, Post.title, Post.views, Post.created_at)
            .where(in_range)
            .order_by(Post.id)
        )
    ).all()
    likes = (
        await db.execute(
            select(Like.post_id, Like.created_at).join(Post, Like.post_id == Post.id).where(in_range)
        )
    ).all()
    comments = (
        await db.execute(
            select(Comment.id, Comment.post_id, Comment.created_at)
            .join(Post, Comment.post_id == Post.id)
            .where(in_range)
        )
    ).all()
    replies = (
        await db.execute(
            select(Reply.comment_id, Reply.created_at)
            .join(Comment, Reply.comment_id == Comment.id)
            .join(Post, Comment.post_id == Post.id)
            .where(in_range)
        )
    ).all()

    return metrics.post_engagement(posts, likes, comments, replies)


async def compute_user_activity_report(db: AsyncSession, now: datetime | None = None) -> dict:
    """Platform user counts and the month-indexed activity table."""
    display = Window.lookback(settings.analytics_activity_months, now)

    total_users = await _scalar(db, select(func.count(User.id)))
    new_users = await _scalar(
        db, select(func.count(User.id)).where(User.created_at >= display.start)
    )
    authors = await _scalar(db, select(func.count(func.distinct(Post.author_id))))

    posts = (await db.execute(select(Post.views, Post.created_at))).all()
    likes = (await db.execute(select(Like.user_id, Like.created_at))).all()
    comments = (await db.execute(select(Comment.user_id, Comment.created_at))).all()
    replies = (await db.execute(select(Reply.user_id, Reply.created_at))).all()
    user_created = (await db.execute(select(User.created_at))).scalars().all()
    first_posts = (
        await db.execute(select(func.min(Post.created_at)).group_by(Post.author_id))
    ).scalars().all()

    table, active_users = metrics.activity_table(
        posts, likes, comments, replies, user_created, first_posts
    )
    return {
        "total_users": total_users,
        "new_users": new_users,
        "active_users": active_users,
        "authors": authors,
        "monthly_activity": table[-settings.analytics_activity_months:],
        "all_monthly_activity": table,
    }


async def compute_growth_series(db: AsyncSession, now: datetime | None = None) -> dict:
    """Month-over-month growth of new users and new posts over six months."""
    window = Window.lookback(settings.analytics_detail_months, now)

    posts = (
        await db.execute(select(Post.created_at).where(Post.created_at >= window.start))
    ).scalars().all()
    users = (
        await db.execute(select(User.created_at).where(User.created_at >= window.start))
    ).scalars().all()

    return {
        "user_growth": metrics.monthly_growth_series(metrics.monthly_counts(users)),
        "post_growth": metrics.monthly_growth_series(metrics.monthly_counts(posts)),
    }
