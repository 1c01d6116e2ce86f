import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.schemas import SiteSettingsCreate, SiteSettingsResponse, SiteSettingsUpdate
from blogdesk.core.cache import cache_delete, cache_get_json, cache_set_json, make_cache_key
from blogdesk.core.config import settings
from blogdesk.core.errors import NotFoundError, ValidationError
from blogdesk.models.site_settings import SiteSettings

logger = logging.getLogger(__name__)

_CACHE_KEY = make_cache_key("site_settings")


async def _first(db: AsyncSession) -> SiteSettings | None:
    result = await db.execute(select(SiteSettings).order_by(SiteSettings.id).limit(1))
    return result.scalar_one_or_none()


async def get_site_settings(db: AsyncSession) -> dict | None:
    """Public site settings, served from cache when possible."""
    cached = await cache_get_json(_CACHE_KEY)
    if cached is not None:
        return cached

    row = await _first(db)
    if row is None:
        return None

    data = SiteSettingsResponse.model_validate(row).model_dump(mode="json")
    await cache_set_json(_CACHE_KEY, data, ttl=settings.cache_site_settings_ttl)
    return data


async def create_site_settings(db: AsyncSession, data: SiteSettingsCreate) -> SiteSettings:
    if await _first(db) is not None:
        raise ValidationError("Site settings already exist, update them instead.")

    row = SiteSettings(**data.model_dump())
    db.add(row)
    await db.commit()
    await db.refresh(row)
    await cache_delete(_CACHE_KEY)
    logger.info("Site settings created", extra={"site_settings_id": row.id})
    return row


async def update_site_settings(db: AsyncSession, data: SiteSettingsUpdate) -> SiteSettings:
    result = await db.execute(select(SiteSettings).where(SiteSettings.id == data.id))
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Settings not found.")

    for field, value in data.model_dump(exclude={"id"}).items():
        setattr(row, field, value)
    await db.commit()
    await db.refresh(row)
    await cache_delete(_CACHE_KEY)
    return row
