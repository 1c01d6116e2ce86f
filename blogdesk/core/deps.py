from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.session import async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Rolls back whatever the handler left uncommitted when it raised.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
