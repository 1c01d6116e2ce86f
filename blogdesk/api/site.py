from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import (
    MessageResponse,
    SiteSettingsCreate,
    SiteSettingsEnvelope,
    SiteSettingsUpdate,
)
from blogdesk.core.deps import get_db
from blogdesk.core.rbac import require_admin
from blogdesk.models.user import User
from blogdesk.services import site as site_svc

router = APIRouter(tags=["site"])


@router.get("/get-site-settings", response_model=SiteSettingsEnvelope)
async def get_site_settings(db: AsyncSession = Depends(get_db)) -> dict:
    return {"success": True, "site_settings": await site_svc.get_site_settings(db)}


@router.post("/create-site-settings", response_model=MessageResponse)
async def create_site_settings(
    body: SiteSettingsCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await site_svc.create_site_settings(db, body)
    return MessageResponse(message="Site Settings has been created successfully.")


@router.put("/update-site-settings", response_model=MessageResponse)
async def update_site_settings(
    body: SiteSettingsUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await site_svc.update_site_settings(db, body)
    return MessageResponse(message="Site Settings has been updated successfully.")
