"""Database connection and session management using SQLAlchemy async ORM"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from testcademy.config import settings

DATABASE_URL = settings.database_url

# Connection pooling only applies to server databases
# pool_recycle=3600: Recycle connections every hour to prevent stale connections
engine_options = {"echo": False}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=3600,
        pool_pre_ping=True,  # Verify connection health before using
    )

engine = create_async_engine(DATABASE_URL, **engine_options)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Usage in FastAPI:
        @router.get("/enquiries")
        async def list_enquiries(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Enquiry))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
