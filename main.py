import asyncio
import sys
from pathlib import Path
from loguru import logger
from config.settings import settings
from database.database import init_db, close_db
from services.asset_store import LocalAssetStore
from services.scheduler_service import setup_scheduler, scheduler
from utils.health_check import check_system_health, get_system_info

def setup_logging():
    Path("logs").mkdir(exist_ok=True)
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=settings.LOG_LEVEL
    )
    logger.add(
        "logs/cafe_menu_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="30 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG"
    )

async def main():
    setup_logging()
    
    logger.info("Initializing database...")
    await init_db()
    
    store = LocalAssetStore()
    health = await check_system_health(store)
    logger.info(f"Health: {health['status']} {health['checks']}")
    logger.info(f"Configuration: {get_system_info()}")
    if health["status"] != "healthy":
        logger.error("Startup checks failed, not starting the maintenance worker")
        await close_db()
        return
    
    setup_scheduler(store)
    logger.info("🚀 Menu maintenance worker is running")
    
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await close_db()

if __name__ == '__main__':
    asyncio.run(main())
