from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import MessageResponse, NotificationListResponse
from blogdesk.core.deps import get_db
from blogdesk.core.rbac import require_admin
from blogdesk.models.user import User
from blogdesk.services import notification as notification_svc

router = APIRouter(tags=["notifications"])


@router.get("/get-notification", response_model=NotificationListResponse)
async def get_notifications(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """All notifications, newest first."""
    notifications = await notification_svc.list_notifications(db)
    return {"success": True, "notifications": notifications}


@router.put("/update-notification/{notification_id}", response_model=MessageResponse)
async def update_notification(
    notification_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await notification_svc.mark_read(db, notification_id)
    return MessageResponse(message="Marked as Read.")


@router.put("/read-all-notifications", response_model=MessageResponse)
async def read_all_notifications(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await notification_svc.mark_all_read(db)
    return MessageResponse(message="Marked all as Read.")
