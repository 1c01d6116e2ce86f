from fastapi import APIRouter

from blogdesk.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Liveness check."""
    return {"success": True, "status": "ok", "service": settings.app_name}
