from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.cache import cache
from app.config import settings
from app.middleware import install_query_counter

POSTS_CHANGED = "posts_changed"

# Module-level engine; tests install their own session factory through
# ``app.dependency_overrides[get_db]`` instead of touching this one.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


def mark_posts_changed(session: AsyncSession) -> None:
    """Flag *session* so cached post pages are dropped once it commits."""
    session.info[POSTS_CHANGED] = True


async def commit(session: AsyncSession) -> None:
    """Commit *session*, then drop cached post pages if it wrote any."""
    await session.commit()
    if session.info.pop(POSTS_CHANGED, False):
        await cache.invalidate_posts()


async def get_db():
    """Yield one session per request; commit on success, roll back on any error."""
    async with async_session() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await session.rollback()
            raise
