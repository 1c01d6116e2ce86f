from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import (
    CategoryListResponse,
    CommentCreate,
    LikeRequest,
    LikeResponse,
    MessageResponse,
    PostCreate,
    PostEnvelope,
    PostUpdate,
    ReplyCreate,
    ViewResponse,
)
from blogdesk.core.config import settings
from blogdesk.core.deps import get_db
from blogdesk.core.rate_limit import limiter
from blogdesk.core.rbac import require_author_or_admin
from blogdesk.core.security import get_current_user
from blogdesk.models.user import User
from blogdesk.services import engagement as engagement_svc
from blogdesk.services import post as post_svc

router = APIRouter(tags=["posts"])


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


@router.post("/create-post", response_model=PostEnvelope)
async def create_post(
    body: PostCreate,
    current_user: User = Depends(require_author_or_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    post = await post_svc.create_post(db, current_user, body)
    if post.published:
        message = "Your post has been created and published successfully."
    else:
        message = "Your post has been saved as a draft."
    return {"success": True, "message": message, "post": post}


@router.put("/publish-post/{post_id}", response_model=MessageResponse)
async def publish_post(
    post_id: int,
    current_user: User = Depends(require_author_or_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await post_svc.publish_post(db, current_user, post_id)
    return MessageResponse(message="Your post is published and available to readers.")


@router.put("/update-post/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: int,
    body: PostUpdate,
    current_user: User = Depends(require_author_or_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    post = await post_svc.update_post(db, current_user, post_id, body)
    return {"success": True, "message": "Your post has been updated.", "post": post}


@router.delete("/delete-post/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(require_author_or_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await post_svc.delete_post(db, current_user, post_id)
    return MessageResponse(message="Your post has been deleted.")


@router.get("/get-category", response_model=CategoryListResponse)
async def get_categories(db: AsyncSession = Depends(get_db)) -> dict:
    """Every category with its post count."""
    return {"success": True, "categories": await post_svc.list_categories(db)}


# ---------------------------------------------------------------------------
# Reader engagement
# ---------------------------------------------------------------------------


@router.post("/post-view/{slug}", response_model=ViewResponse)
@limiter.limit(settings.rate_limit_views)
async def post_view(
    request: Request,
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> ViewResponse:
    """Count one view of a published post."""
    views = await engagement_svc.record_view(db, slug)
    return ViewResponse(views=views)


@router.post("/like-post", response_model=LikeResponse)
async def like_post(
    body: LikeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> LikeResponse:
    liked, like_count = await engagement_svc.toggle_like(db, current_user, body.post_id)
    message = "Post liked successfully" if liked else "Post unliked successfully"
    return LikeResponse(message=message, like_count=like_count)


@router.post("/post-comment/{slug}", response_model=MessageResponse)
async def post_comment(
    slug: str,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await post_svc.add_comment(db, current_user, slug, body.comment)
    return MessageResponse(message="Commented successfully")


@router.post("/comment-reply", response_model=MessageResponse)
async def comment_reply(
    body: ReplyCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await post_svc.add_reply(db, current_user, body.comment_id, body.reply)
    return MessageResponse(message="Replied Successfully")
