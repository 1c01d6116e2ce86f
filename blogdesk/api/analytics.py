"""Analytics dashboards for authors and admins."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import (
    AuthorAnalyticsResponse,
    DetailedPostAnalyticsResponse,
    GrowthReportResponse,
    PlatformAnalyticsResponse,
    UserAnalyticsResponse,
)
from blogdesk.core.deps import get_db
from blogdesk.core.rbac import require_admin, require_author_or_admin
from blogdesk.models.user import User
from blogdesk.services import analytics as analytics_svc

router = APIRouter(tags=["analytics"])

# Lookback is expressed in months despite the path parameter's name
LookbackMonths = Path(..., gt=0, le=120, description="Lookback window in months")


@router.get("/post-analytics/{days}", response_model=AuthorAnalyticsResponse)
async def get_post_analytics(
    days: int = LookbackMonths,
    current_user: User = Depends(require_author_or_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Totals, categories and growth for the current author's posts."""
    report = await analytics_svc.compute_author_report(db, current_user.id, days)
    return {"success": True, "analytics": report}


@router.get("/admin-overview/{days}", response_model=PlatformAnalyticsResponse)
async def get_admin_overview(
    days: int = LookbackMonths,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    report = await analytics_svc.compute_platform_report(db, days)
    return {"success": True, "overview": report}


@router.get(
    "/admin-post-analytics",
    response_model=DetailedPostAnalyticsResponse,
    response_model_exclude_none=True,
)
async def get_admin_post_analytics(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Per-post engagement and monthly growth for the last six months."""
    report = await analytics_svc.compute_detailed_post_report(db)
    return {"success": True, "post_analytics": report}


@router.get("/admin-user-analytics", response_model=UserAnalyticsResponse)
async def get_admin_user_analytics(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    report = await analytics_svc.compute_user_activity_report(db)
    return {"success": True, "user_analytics": report}


@router.get("/admin-growth-reports", response_model=GrowthReportResponse)
async def get_admin_growth_reports(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    report = await analytics_svc.compute_growth_series(db)
    return {"success": True, "growth_report": report}
