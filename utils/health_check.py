"""
System health checks for monitoring.
"""
from datetime import datetime
from database.database import get_session
from services.asset_store import AssetStore
from utils.exceptions import StoreUnavailable
from sqlalchemy import text
from loguru import logger

HEALTH_PROBE_PATH = "_health/probe.txt"

async def check_database_connection() -> tuple[bool, str]:
    """
    Runs SELECT 1 against the relational store.
    
    Returns:
        tuple[bool, str]: (connected, message)
    """
    try:
        async for session in get_session():
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            return True, "Database is reachable"
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False, f"Database connection failed: {str(e)}"

async def check_asset_store(store: AssetStore) -> tuple[bool, str]:
    """Writes and removes a small probe file in the asset store."""
    try:
        await store.upload(HEALTH_PROBE_PATH, b"ok")
        await store.remove([HEALTH_PROBE_PATH])
        return True, "Asset store is writable"
    except StoreUnavailable as e:
        logger.error(f"Asset store check failed: {e}")
        return False, f"Asset store failed: {str(e)}"

async def check_system_health(store: AssetStore) -> dict:
    db_status, db_message = await check_database_connection()
    assets_status, assets_message = await check_asset_store(store)
    
    return {
        "status": "healthy" if db_status and assets_status else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "checks": {
            "database": {
                "status": "ok" if db_status else "error",
                "message": db_message
            },
            "asset_store": {
                "status": "ok" if assets_status else "error",
                "message": assets_message
            }
        }
    }

def get_system_info() -> dict:
    from config.settings import settings
    
    return {
        "database_type": "PostgreSQL" if settings.DATABASE_URL.startswith("postgresql") else "SQLite",
        "asset_bucket": settings.ASSET_BUCKET,
        "asset_root": settings.ASSET_STORAGE_ROOT,
        "max_image_mb": round(settings.ASSET_MAX_BYTES / (1024 * 1024), 1),
        "reconcile_interval_minutes": settings.RECONCILE_INTERVAL_MINUTES
    }
