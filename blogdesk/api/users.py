from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import MessageResponse, RoleUpdate, UserBrief
from blogdesk.core.config import settings
from blogdesk.core.deps import get_db
from blogdesk.core.rate_limit import limiter
from blogdesk.core.rbac import require_admin
from blogdesk.core.security import get_current_user
from blogdesk.models.user import User
from blogdesk.services.user import request_author_role, update_role

router = APIRouter(tags=["users"])


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)) -> dict:
    """Return the authenticated user with their role."""
    return {
        "success": True,
        "user": {**UserBrief.model_validate(current_user).model_dump(), "role": current_user.role},
    }


@router.post("/author-request", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_sensitive)
async def author_request(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await request_author_role(db, current_user)
    return MessageResponse(message="You will get the mail within 24 hours.")


@router.put("/update-role/{user_id}", response_model=MessageResponse)
async def update_user_role(
    user_id: int,
    body: RoleUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await update_role(db, user_id, body.role)
    return MessageResponse(message="Role updated successfully")
