from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from config.settings import settings
from database.base import Base
from loguru import logger

engine = None
async_session = None

async def init_db(database_url: str | None = None):
    """
    Connects to the relational store and creates missing tables.
    SQLite is used for local development, PostgreSQL in production.
    """
    global engine, async_session
    
    database_url = database_url or settings.DATABASE_URL
    
    if database_url.startswith("sqlite"):
        database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        logger.info("Using SQLite database (local development)")
        engine = create_async_engine(
            database_url,
            echo=False,
            poolclass=NullPool,
            connect_args={"check_same_thread": False}
        )
    elif database_url.startswith("postgresql://") or database_url.startswith("postgresql+asyncpg://"):
        if not database_url.startswith("postgresql+asyncpg://"):
            database_url = database_url.replace("postgresql://", "postgresql+asyncpg://")
        
        logger.info("Using PostgreSQL database (production)")
        engine = create_async_engine(
            database_url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600
        )
    else:
        logger.warning(f"Unknown database type: {database_url}. Using default engine settings.")
        engine = create_async_engine(database_url, echo=False)
    
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

def get_session_factory() -> async_sessionmaker:
    if async_session is None:
        raise RuntimeError("Database is not initialized. Call init_db() first.")
    return async_session

async def get_session():
    session_factory = get_session_factory()
    
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}", exc_info=True)
            raise

async def close_db():
    global engine, async_session
    if engine is not None:
        await engine.dispose()
    engine = None
    async_session = None
