"""Analytics aggregation: pure logic, no DB dependency.

The report builders in ``blogdesk.services.analytics`` fetch plain row tuples
and hand them to the functions here. Month buckets are keyed by a
``(year, month)`` tuple in UTC and only formatted as ``YYYY-MM`` on output.
"""

import calendar
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

UNCATEGORIZED = "Uncategorized"

# Metrics that make up a post's engagement
ENGAGEMENT_METRICS = ("views", "likes", "comments", "replies")

MonthKey = tuple[int, int]

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def as_utc(ts: datetime) -> datetime:
    """Naive timestamps coming back from the store are UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def month_key(ts: datetime) -> MonthKey:
    ts = as_utc(ts)
    return ts.year, ts.month


def format_month(key: MonthKey) -> str:
    year, month = key
    return f"{year:04d}-{month:02d}"


def sub_months(ts: datetime, months: int) -> datetime:
    """Move ``ts`` back by calendar months, clamping the day to the month's end."""
    index = ts.year * 12 + (ts.month - 1) - months
    year, month = index // 12, index % 12 + 1
    day = min(ts.day, calendar.monthrange(year, month)[1])
    return ts.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class Window:
    """Inclusive ``[start, end]`` time range spanning ``months`` calendar months."""

    start: datetime
    end: datetime
    months: int

    @classmethod
    def lookback(cls, months: int, now: datetime | None = None) -> "Window":
        end = as_utc(now) if now is not None else datetime.now(timezone.utc)
        return cls(start=sub_months(end, months), end=end, months=months)

    def prior(self) -> "Window":
        """The equal-length window immediately preceding this one."""
        return Window(
            start=sub_months(self.start, self.months),
            end=sub_months(self.end, self.months),
            months=self.months,
        )

    def __contains__(self, ts: datetime) -> bool:
        return self.start <= as_utc(ts) <= self.end


# ---------------------------------------------------------------------------
# Growth
# ---------------------------------------------------------------------------


def growth_rate(current: int | float, previous: int | float) -> float:
    """Percentage change from ``previous`` to ``current``; 0 on a zero baseline."""
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


def growth_percentage(current: int | float, previous: int | float) -> str:
    """``growth_rate`` rounded to two decimals, as a string to keep trailing zeros."""
    return f"{growth_rate(current, previous):.2f}"


def growth_detail(current: int, previous: int) -> dict:
    return {
        "percentage": growth_percentage(current, previous),
        "current_period": current,
        "last_period": previous,
    }


def growth_block(current: Mapping[str, int], previous: Mapping[str, int]) -> dict[str, dict]:
    """Pair two same-shaped totals mappings into a growth detail per metric."""
    return {
        metric: growth_detail(value, previous.get(metric, 0))
        for metric, value in current.items()
    }


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def aggregate(
    rows: Iterable[T],
    key: Callable[[T], K],
    metric: Callable[[T], int] = lambda _row: 1,
) -> dict[K, int]:
    """Sum ``metric`` over ``rows`` grouped by ``key``, in first-seen key order."""
    totals: dict[K, int] = {}
    for row in rows:
        group = key(row)
        totals[group] = totals.get(group, 0) + metric(row)
    return totals


def category_percentages(labels: Iterable[str | None], limit: int = 4) -> list[dict]:
    """Top categories by post count with their share of all posts.

    Ties keep the order in which categories were first seen, since the sort
    is on count only.
    """
    counts = aggregate(labels, key=lambda label: label or UNCATEGORIZED)
    total = sum(counts.values())
    rows = [
        {
            "name": name,
            "value": count / total * 100 if total else 0.0,
            "count": count,
        }
        for name, count in counts.items()
    ]
    rows.sort(key=lambda row: row["count"], reverse=True)
    return rows[:limit]


def category_metrics(
    names: Iterable[str],
    posts: Iterable[Mapping[str, Any]],
    comment_post_ids: Iterable[int],
    like_post_ids: Iterable[int],
) -> list[dict]:
    """Views, likes and comments per category, from already fetched rows."""
    posts = list(posts)
    category_of = {post["id"]: post["category"] for post in posts}

    views = aggregate(posts, key=lambda post: post["category"], metric=lambda post: post["views"])
    comments = aggregate(
        (pid for pid in comment_post_ids if pid in category_of), key=category_of.__getitem__
    )
    likes = aggregate(
        (pid for pid in like_post_ids if pid in category_of), key=category_of.__getitem__
    )

    return [
        {
            "name": name,
            "views": views.get(name, 0),
            "likes": likes.get(name, 0),
            "comments": comments.get(name, 0),
        }
        for name in names
    ]


# ---------------------------------------------------------------------------
# Month series
# ---------------------------------------------------------------------------


def monthly_counts(timestamps: Iterable[datetime]) -> dict[MonthKey, int]:
    return aggregate(timestamps, key=month_key)


def monthly_growth_series(counts: Mapping[MonthKey, int]) -> list[dict]:
    """Chronological ``{month, count, growth_rate}`` rows.

    The first month has nothing to compare against and gets a rate of 0.
    """
    series = []
    previous = 0
    for key in sorted(counts):
        count = counts[key]
        series.append(
            {
                "month": format_month(key),
                "count": count,
                "growth_rate": growth_rate(count, previous),
            }
        )
        previous = count
    return series


def views_chart(posts: Iterable[tuple[int, str, int, datetime]]) -> list[dict]:
    """Monthly view totals with the contributing posts for drill-down.

    ``posts`` rows are ``(id, title, views, created_at)``.
    """
    points: dict[MonthKey, dict] = {}
    for post_id, title, views, created_at in posts:
        key = month_key(created_at)
        point = points.setdefault(key, {"month": format_month(key), "views": 0, "posts": []})
        point["views"] += views
        point["posts"].append({"id": post_id, "title": title, "views": views})
    return [points[key] for key in sorted(points)]


def users_chart(created: Iterable[datetime]) -> list[dict]:
    counts = monthly_counts(created)
    return [{"month": format_month(key), "users": counts[key]} for key in sorted(counts)]


# ---------------------------------------------------------------------------
# Per-post engagement
# ---------------------------------------------------------------------------


def _empty_month() -> dict:
    return {
        "views": 0,
        "likes": 0,
        "comments": 0,
        "replies": 0,
        "posts": 0,
        "total_engagement": 0,
    }


def post_engagement(
    posts: Iterable[tuple[int, str, int, datetime]],
    likes: Iterable[tuple[int, datetime]],
    comments: Iterable[tuple[int, int, datetime]],
    replies: Iterable[tuple[int, datetime]],
) -> dict:
    """Per-post totals plus monthly buckets with month-over-month growth.

    Row shapes:
      posts    (id, title, views, created_at)
      likes    (post_id, created_at)
      comments (id, post_id, created_at)
      replies  (comment_id, created_at)

    A post's views and post count land in the post's creation month; each
    like, comment and reply lands in its own creation month. Interactions on
    posts outside ``posts`` are ignored.
    """
    months: dict[MonthKey, dict] = {}

    def bucket(ts: datetime) -> dict:
        return months.setdefault(month_key(ts), _empty_month())

    by_post: dict[int, dict] = {}
    post_analytics: list[dict] = []
    for post_id, title, views, created_at in posts:
        entry = {
            "post_id": post_id,
            "title": title,
            "views": views,
            "likes": 0,
            "comments": 0,
            "replies": 0,
            "total_engagement": 0,
            "created_at": created_at,
        }
        by_post[post_id] = entry
        post_analytics.append(entry)

        month = bucket(created_at)
        month["views"] += views
        month["posts"] += 1

    for post_id, created_at in likes:
        if post_id not in by_post:
            continue
        by_post[post_id]["likes"] += 1
        bucket(created_at)["likes"] += 1

    comment_post: dict[int, int] = {}
    for comment_id, post_id, created_at in comments:
        if post_id not in by_post:
            continue
        comment_post[comment_id] = post_id
        by_post[post_id]["comments"] += 1
        bucket(created_at)["comments"] += 1

    for comment_id, created_at in replies:
        post_id = comment_post.get(comment_id)
        if post_id is None:
            continue
        by_post[post_id]["replies"] += 1
        bucket(created_at)["replies"] += 1

    for entry in post_analytics:
        entry["total_engagement"] = sum(entry[m] for m in ENGAGEMENT_METRICS)

    monthly_analytics: list[dict] = []
    previous: dict | None = None
    for key in sorted(months):
        data = months[key]
        data["total_engagement"] = sum(data[m] for m in ENGAGEMENT_METRICS)
        row = {"month": format_month(key), **data}
        if previous is not None:
            for metric in ENGAGEMENT_METRICS:
                row[f"{metric}_growth"] = round(growth_rate(data[metric], previous[metric]), 2)
        monthly_analytics.append(row)
        previous = data

    return {"monthly_analytics": monthly_analytics, "post_analytics": post_analytics}


# ---------------------------------------------------------------------------
# User activity
# ---------------------------------------------------------------------------


def activity_table(
    posts: Iterable[tuple[int, datetime]],
    likes: Iterable[tuple[int, datetime]],
    comments: Iterable[tuple[int, datetime]],
    replies: Iterable[tuple[int, datetime]],
    user_created: Iterable[datetime],
    author_first_posts: Iterable[datetime] = (),
) -> tuple[list[dict], int]:
    """Build the month-indexed activity table.

    ``posts`` rows are ``(views, created_at)``; ``likes``, ``comments`` and
    ``replies`` rows are ``(user_id, created_at)``. Returns the chronological
    table and the sum of each month's distinct active-user count (a user
    active in two months counts twice).
    """
    months: dict[MonthKey, dict] = {}
    active: dict[MonthKey, set] = {}

    def row(ts: datetime) -> tuple[MonthKey, dict]:
        key = month_key(ts)
        if key not in months:
            months[key] = {
                "new_users": 0,
                "active_users": 0,
                "interactions": {"views": 0, "likes": 0, "comments": 0, "replies": 0},
                "new_authors": 0,
            }
            active[key] = set()
        return key, months[key]

    for views, created_at in posts:
        row(created_at)[1]["interactions"]["views"] += views

    for kind, rows in (("likes", likes), ("comments", comments), ("replies", replies)):
        for user_id, created_at in rows:
            key, data = row(created_at)
            data["interactions"][kind] += 1
            active[key].add(user_id)

    for created_at in user_created:
        row(created_at)[1]["new_users"] += 1

    for first_post_at in author_first_posts:
        row(first_post_at)[1]["new_authors"] += 1

    table = []
    for key in sorted(months):
        data = months[key]
        data["active_users"] = len(active[key])
        table.append({"month": format_month(key), **data})

    return table, sum(len(users) for users in active.values())
