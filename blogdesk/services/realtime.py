"""Fire-and-forget realtime events over Redis pub/sub.

Subscribers (the websocket gateway in front of the web client) listen on
``settings.realtime_channel``. Publishing never raises.
"""

import json
import logging

from blogdesk.core.cache import get_redis
from blogdesk.core.config import settings

logger = logging.getLogger(__name__)


async def publish(event: str, payload: dict) -> bool:
    """Publish ``{"event", "data"}`` on the realtime channel. Returns False on failure."""
    message = json.dumps({"event": event, "data": payload})
    try:
        r = await get_redis()
        await r.publish(settings.realtime_channel, message)
    except Exception:
        logger.exception("Realtime publish failed for event=%s", event)
        return False
    return True


async def push_like_count(post_id: int, like_count: int) -> bool:
    return await publish("like-updated", {"post_id": post_id, "like_count": like_count})
