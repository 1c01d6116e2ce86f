from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from blogdesk.models.user import Role

# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class RoleUpdate(BaseModel):
    role: Role


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class GrowthDetail(BaseModel):
    percentage: str
    current_period: int
    last_period: int


class CategoryPercentage(BaseModel):
    name: str
    value: float
    count: int


class CategoryMetric(BaseModel):
    name: str
    views: int
    likes: int
    comments: int


class PostSummary(BaseModel):
    id: int
    title: str
    slug: str
    featured_image: str | None
    views: int
    category: str
    created_at: datetime


class AuthorAnalytics(BaseModel):
    custom_time: int
    total_views: int
    total_comments: int
    total_likes: int
    total_posts: int
    posts: list[PostSummary]
    growth: dict[str, GrowthDetail]
    category_percentages: list[CategoryPercentage]
    category_metrics: list[CategoryMetric]


class ChartPost(BaseModel):
    id: int
    title: str
    views: int


class ViewsChartPoint(BaseModel):
    month: str
    views: int
    posts: list[ChartPost]


class UsersChartPoint(BaseModel):
    month: str
    users: int


class PlatformAnalytics(AuthorAnalytics):
    total_users: int
    views_chart: list[ViewsChartPoint]
    users_chart: list[UsersChartPoint]


class MonthlyMetrics(BaseModel):
    month: str
    views: int
    likes: int
    comments: int
    replies: int
    posts: int
    total_engagement: int
    # Absent on the first month of the series
    views_growth: float | None = None
    likes_growth: float | None = None
    comments_growth: float | None = None
    replies_growth: float | None = None


class PostAnalytics(BaseModel):
    post_id: int
    title: str
    views: int
    likes: int
    comments: int
    replies: int
    total_engagement: int
    created_at: datetime


class DetailedPostAnalytics(BaseModel):
    monthly_analytics: list[MonthlyMetrics]
    post_analytics: list[PostAnalytics]


class Interactions(BaseModel):
    views: int
    likes: int
    comments: int
    replies: int


class MonthlyUserActivity(BaseModel):
    month: str
    new_users: int
    active_users: int
    interactions: Interactions
    new_authors: int


class PlatformUserAnalytics(BaseModel):
    total_users: int
    new_users: int
    active_users: int
    authors: int
    monthly_activity: list[MonthlyUserActivity]
    all_monthly_activity: list[MonthlyUserActivity]


class GrowthPoint(BaseModel):
    month: str
    count: int
    growth_rate: float


class GrowthReport(BaseModel):
    user_growth: list[GrowthPoint]
    post_growth: list[GrowthPoint]


class AuthorAnalyticsResponse(BaseModel):
    success: bool = True
    analytics: AuthorAnalytics


class PlatformAnalyticsResponse(BaseModel):
    success: bool = True
    overview: PlatformAnalytics


class DetailedPostAnalyticsResponse(BaseModel):
    success: bool = True
    post_analytics: DetailedPostAnalytics


class UserAnalyticsResponse(BaseModel):
    success: bool = True
    user_analytics: PlatformUserAnalytics


class GrowthReportResponse(BaseModel):
    success: bool = True
    growth_report: GrowthReport


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    is_read: bool
    user: UserBrief | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: list[NotificationResponse]


# ---------------------------------------------------------------------------
# Post engagement
# ---------------------------------------------------------------------------


class LikeRequest(BaseModel):
    post_id: int = Field(..., gt=0)


class LikeResponse(BaseModel):
    success: bool = True
    message: str
    like_count: int


class ViewResponse(BaseModel):
    success: bool = True
    message: str = "Views updated successfully"
    views: int


# ---------------------------------------------------------------------------
# Site settings
# ---------------------------------------------------------------------------

_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class SiteSettingsCreate(BaseModel):
    site_name: str = Field(..., min_length=1, max_length=255)
    hero_title: str = Field(..., min_length=1, max_length=255)
    hero_description: str = Field(..., min_length=1)
    logo_url: str = Field(..., min_length=1, max_length=512)
    hero_image_url: str | None = Field(None, max_length=512)
    accent_color: str = Field(..., pattern=_COLOR)
    gradient_start: str = Field(..., pattern=_COLOR)
    gradient_end: str = Field(..., pattern=_COLOR)


class SiteSettingsUpdate(SiteSettingsCreate):
    id: int


class SiteSettingsResponse(BaseModel):
    id: int
    site_name: str
    hero_title: str
    hero_description: str
    logo_url: str
    hero_image_url: str | None
    accent_color: str
    gradient_start: str
    gradient_end: str

    model_config = {"from_attributes": True}


class SiteSettingsEnvelope(BaseModel):
    success: bool = True
    site_settings: SiteSettingsResponse | None


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255)
    description: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    featured_image: str | None = Field(None, max_length=512)
    category: str = Field(..., min_length=1, max_length=100)
    tags: list[str] = Field(..., min_length=1)


class PostCreate(PostUpdate):
    publish: bool = False


class LabelBrief(BaseModel):
    label: str
    value: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    id: int
    title: str
    slug: str
    description: str | None
    content: str
    featured_image: str | None
    published: bool
    published_at: datetime | None
    min_read: int
    views: int
    author_id: int
    category: LabelBrief | None
    tags: list[LabelBrief]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostEnvelope(BaseModel):
    success: bool = True
    message: str
    post: PostResponse


class CategoryCount(BaseModel):
    id: int
    label: str
    value: str
    post_count: int


class CategoryListResponse(BaseModel):
    success: bool = True
    categories: list[CategoryCount]


class CommentCreate(BaseModel):
    comment: str


class ReplyCreate(BaseModel):
    comment_id: int = Field(..., gt=0)
    reply: str
