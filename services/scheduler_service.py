from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from database.database import get_session
from services.asset_store import AssetStore
from services.reconcile_service import reconcile_orphan_assets
from config.settings import settings
from utils.exceptions import MenuError
from loguru import logger

scheduler = AsyncIOScheduler()

async def run_asset_reconciliation(store: AssetStore):
    """
    Removes image assets left behind by failed uploads or deletions.
    Runs on the interval configured by RECONCILE_INTERVAL_MINUTES.
    """
    async for session in get_session():
        try:
            report = await reconcile_orphan_assets(session, store)
        except MenuError as e:
            logger.error(f"Asset reconciliation run failed: {e}")
            return
        
        total = sum(len(paths) for paths in report.values())
        if total:
            logger.info(f"Asset reconciliation removed {total} files across {len(report)} cafes")
        else:
            logger.debug("Asset reconciliation: nothing to remove")

def setup_scheduler(store: AssetStore):
    scheduler.add_job(
        run_asset_reconciliation,
        trigger=IntervalTrigger(minutes=settings.RECONCILE_INTERVAL_MINUTES),
        args=[store],
        id="asset_reconciliation",
        replace_existing=True
    )
    
    scheduler.start()
    logger.info("Scheduler started")
