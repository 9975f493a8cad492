"""
Database engine, session factory and declarative base.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from service_center.config import get_settings

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=settings.debug)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    """
    Yield a database session for the duration of a request.
    """
    async with SessionLocal() as session:
        yield session


async def init_db(bind=None):
    """Create all tables that do not exist yet."""
    # Importing the models registers them on Base.metadata
    import service_center.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
