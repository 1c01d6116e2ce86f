"""Redis client plus best-effort JSON caching helpers.

Cache failures never break a request: reads fall through to the database and
writes are skipped, with the exception logged.
"""

import json
import logging
from typing import Any

import redis.asyncio as aioredis

from blogdesk.core.config import settings

logger = logging.getLogger(__name__)

_redis: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def make_cache_key(*parts: str) -> str:
    return "blogdesk:cache:" + ":".join(parts)


async def cache_get_json(key: str) -> Any | None:
    try:
        r = await get_redis()
        raw = await r.get(key)
    except Exception:
        logger.exception("Cache get failed for key=%s", key)
        return None
    return json.loads(raw) if raw is not None else None


async def cache_set_json(key: str, value: Any, ttl: int = 60) -> None:
    try:
        r = await get_redis()
        await r.set(key, json.dumps(value, default=str), ex=ttl)
    except Exception:
        logger.exception("Cache set failed for key=%s", key)


async def cache_delete(key: str) -> None:
    try:
        r = await get_redis()
        await r.delete(key)
    except Exception:
        logger.exception("Cache delete failed for key=%s", key)
