"""Tests for the pure aggregation helpers in blogdesk.services.metrics."""

from datetime import datetime, timedelta, timezone

import pytest

from blogdesk.services import metrics
from blogdesk.services.metrics import Window


def _ts(year: int, month: int, day: int = 1, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class TestMonths:
    def test_month_key_and_format(self):
        assert metrics.month_key(_ts(2026, 3, 9)) == (2026, 3)
        assert metrics.format_month((2026, 3)) == "2026-03"

    def test_naive_timestamps_are_utc(self):
        assert metrics.month_key(datetime(2026, 1, 31, 23, 30)) == (2026, 1)

    def test_aware_timestamps_are_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        # 01:00 on Feb 1st at UTC+2 is still January in UTC
        assert metrics.month_key(datetime(2026, 2, 1, 1, 0, tzinfo=plus_two)) == (2026, 1)

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (_ts(2026, 1, 15), 2, _ts(2025, 11, 15)),
            (_ts(2026, 3, 31), 1, _ts(2026, 2, 28)),
            (_ts(2024, 3, 31), 1, _ts(2024, 2, 29)),
            (_ts(2026, 6, 15), 12, _ts(2025, 6, 15)),
        ],
    )
    def test_sub_months_clamps_day(self, start, months, expected):
        assert metrics.sub_months(start, months) == expected


class TestWindow:
    def test_lookback_and_prior(self):
        window = Window.lookback(6, now=_ts(2026, 6, 15))
        assert window.start == _ts(2025, 12, 15)
        assert window.end == _ts(2026, 6, 15)

        prior = window.prior()
        assert prior.start == _ts(2025, 6, 15)
        assert prior.end == window.start
        assert prior.months == 6

    def test_contains(self):
        window = Window.lookback(6, now=_ts(2026, 6, 15))
        assert _ts(2026, 1, 1) in window
        assert datetime(2026, 1, 1) in window
        assert _ts(2025, 12, 1) not in window
        assert _ts(2026, 7, 1) not in window


class TestGrowth:
    @pytest.mark.parametrize(
        "current, previous, expected",
        [(150, 100, 50.0), (50, 100, -50.0), (7, 7, 0.0), (5, 0, 0.0), (0, 0, 0.0)],
    )
    def test_growth_rate(self, current, previous, expected):
        assert metrics.growth_rate(current, previous) == pytest.approx(expected)

    def test_percentage_is_two_decimal_string(self):
        assert metrics.growth_percentage(180, 85) == "111.76"
        assert metrics.growth_percentage(1, 3) == "-66.67"
        assert metrics.growth_percentage(3, 0) == "0.00"

    def test_growth_block_pairs_metrics(self):
        block = metrics.growth_block({"views": 20, "posts": 2}, {"views": 10})
        assert block == {
            "views": {"percentage": "100.00", "current_period": 20, "last_period": 10},
            "posts": {"percentage": "0.00", "current_period": 2, "last_period": 0},
        }


class TestCategories:
    def test_share_and_order(self):
        rows = metrics.category_percentages(["Tech", "Tech", "Life", "Tech"])
        assert rows == [
            {"name": "Tech", "value": 75.0, "count": 3},
            {"name": "Life", "value": 25.0, "count": 1},
        ]

    def test_missing_label_is_uncategorized(self):
        rows = metrics.category_percentages([None, "Tech"])
        assert {row["name"] for row in rows} == {metrics.UNCATEGORIZED, "Tech"}

    def test_limit_and_stable_ties(self):
        rows = metrics.category_percentages(["B", "A", "C", "D", "E", "E"], limit=4)
        assert [row["name"] for row in rows] == ["E", "B", "A", "C"]
        assert sum(row["count"] for row in rows) <= 6

    def test_no_posts(self):
        assert metrics.category_percentages([]) == []

    def test_category_metrics(self):
        posts = [
            {"id": 1, "category": "Tech", "views": 100},
            {"id": 2, "category": "Tech", "views": 50},
            {"id": 3, "category": "Life", "views": 10},
        ]
        rows = metrics.category_metrics(
            ["Tech", "Life", "Food"],
            posts,
            comment_post_ids=[1, 3, 3, 99],
            like_post_ids=[2],
        )
        assert rows == [
            {"name": "Tech", "views": 150, "likes": 1, "comments": 1},
            {"name": "Life", "views": 10, "likes": 0, "comments": 2},
            {"name": "Food", "views": 0, "likes": 0, "comments": 0},
        ]


class TestSeries:
    def test_aggregate_with_metric(self):
        rows = [("a", 2), ("b", 3), ("a", 5)]
        assert metrics.aggregate(rows, key=lambda r: r[0], metric=lambda r: r[1]) == {"a": 7, "b": 3}

    def test_monthly_growth_series_is_chronological(self):
        series = metrics.monthly_growth_series({(2026, 2): 4, (2026, 1): 2, (2026, 3): 2})
        assert series == [
            {"month": "2026-01", "count": 2, "growth_rate": 0.0},
            {"month": "2026-02", "count": 4, "growth_rate": 100.0},
            {"month": "2026-03", "count": 2, "growth_rate": -50.0},
        ]

    def test_monthly_counts_sum_to_total(self):
        stamps = [_ts(2026, 1, 3), _ts(2026, 1, 20), _ts(2026, 4, 2)]
        counts = metrics.monthly_counts(stamps)
        assert sum(counts.values()) == len(stamps)

    def test_views_chart(self):
        chart = metrics.views_chart(
            [
                (1, "A", 10, _ts(2026, 1, 5)),
                (2, "B", 5, _ts(2026, 1, 20)),
                (3, "C", 7, _ts(2025, 12, 1)),
            ]
        )
        assert chart == [
            {"month": "2025-12", "views": 7, "posts": [{"id": 3, "title": "C", "views": 7}]},
            {
                "month": "2026-01",
                "views": 15,
                "posts": [
                    {"id": 1, "title": "A", "views": 10},
                    {"id": 2, "title": "B", "views": 5},
                ],
            },
        ]

    def test_users_chart(self):
        chart = metrics.users_chart([_ts(2026, 2, 1), _ts(2026, 1, 1), _ts(2026, 2, 9)])
        assert chart == [{"month": "2026-01", "users": 1}, {"month": "2026-02", "users": 2}]


class TestPostEngagement:
    def test_interactions_land_in_their_own_month(self):
        march, april = _ts(2026, 3, 10), _ts(2026, 4, 2)
        report = metrics.post_engagement(
            posts=[(1, "P", 100, march)],
            likes=[(1, march), (1, march)],
            comments=[(10, 1, april)],
            replies=[],
        )

        first, second = report["monthly_analytics"]
        assert first == {
            "month": "2026-03",
            "views": 100,
            "likes": 2,
            "comments": 0,
            "replies": 0,
            "posts": 1,
            "total_engagement": 102,
        }
        assert second["month"] == "2026-04"
        assert second["views"] == 0
        assert second["comments"] == 1
        assert second["total_engagement"] == 1
        assert second["views_growth"] == -100.0
        assert second["comments_growth"] == 0.0

        (post,) = report["post_analytics"]
        assert post["views"] == 100
        assert post["likes"] == 2
        assert post["comments"] == 1
        assert post["replies"] == 0
        assert post["total_engagement"] == 103

    def test_replies_follow_their_comment_post(self):
        jan = _ts(2026, 1, 5)
        report = metrics.post_engagement(
            posts=[(1, "P", 0, jan), (2, "Q", 0, jan)],
            likes=[(99, jan)],
            comments=[(10, 2, jan)],
            replies=[(10, jan), (10, jan), (77, jan)],
        )
        by_id = {row["post_id"]: row for row in report["post_analytics"]}
        assert by_id[2]["replies"] == 2
        assert by_id[2]["total_engagement"] == 3
        assert by_id[1]["total_engagement"] == 0
        assert report["monthly_analytics"][0]["likes"] == 0

    def test_growth_is_rounded(self):
        report = metrics.post_engagement(
            posts=[(1, "P", 3, _ts(2026, 1, 1)), (2, "Q", 1, _ts(2026, 2, 1))],
            likes=[],
            comments=[],
            replies=[],
        )
        assert report["monthly_analytics"][1]["views_growth"] == -66.67

    def test_empty(self):
        assert metrics.post_engagement([], [], [], []) == {
            "monthly_analytics": [],
            "post_analytics": [],
        }


class TestActivityTable:
    def test_table_and_headline(self):
        jan, feb = _ts(2026, 1, 10), _ts(2026, 2, 10)
        table, active = metrics.activity_table(
            posts=[(100, jan), (50, feb)],
            likes=[(1, jan), (1, jan), (2, jan)],
            comments=[(1, feb)],
            replies=[(3, feb)],
            user_created=[jan, jan, feb],
            author_first_posts=[jan],
        )

        assert table == [
            {
                "month": "2026-01",
                "new_users": 2,
                "active_users": 2,
                "interactions": {"views": 100, "likes": 3, "comments": 0, "replies": 0},
                "new_authors": 1,
            },
            {
                "month": "2026-02",
                "new_users": 1,
                "active_users": 2,
                "interactions": {"views": 50, "likes": 0, "comments": 1, "replies": 1},
                "new_authors": 0,
            },
        ]
        # User 1 is active in both months and counted twice
        assert active == 4

    def test_no_activity(self):
        assert metrics.activity_table([], [], [], [], []) == ([], 0)
