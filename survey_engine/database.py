"""Database connection and session management."""
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine.url import make_url
from survey_engine.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

parsed_url = make_url(settings.database_url)
is_sqlite = parsed_url.drivername.startswith("sqlite")

# Determine if we need SSL (for hosted databases)
connect_args = {}
needs_ssl = not is_sqlite and (
    "amazonaws" in settings.database_url or
    settings.environment == "production"
)

if needs_ssl:
    connect_args["ssl"] = "require"
    logger.debug("SSL connection enabled (ssl=require)")
else:
    logger.debug("SSL connection disabled (local development)")

engine_kwargs = {
    "echo": settings.environment == "development",
    "future": True,
    "connect_args": connect_args,
    "pool_pre_ping": True,  # Verify connections before use
}

if not is_sqlite:
    # Keep pool sizing conservative to avoid exhausting limited database connections
    engine_kwargs["pool_size"] = max(1, settings.db_pool_size)
    engine_kwargs["max_overflow"] = max(0, settings.db_max_overflow)
    engine_kwargs["pool_recycle"] = 3600

# Create async engine
try:
    engine = create_async_engine(settings.database_url, **engine_kwargs)
    logger.debug("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


# Dependency for FastAPI
async def get_db():
    """FastAPI dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
