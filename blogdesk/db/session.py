from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from blogdesk.core.config import settings

# Echo SQL only when explicitly debugging; analytics queries are chatty
engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
