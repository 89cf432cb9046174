from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from loguru import logger
from models.cafe import Cafe
from models.menu_item import MenuItem
from services.asset_store import AssetStore
from utils.decorators import store_errors
from utils.exceptions import StoreUnavailable
from typing import Dict, List, Optional, Set

@store_errors
async def get_referenced_paths(session: AsyncSession, store: AssetStore) -> Set[str]:
    """Paths of every managed image any menu item points to, across all cafes."""
    result = await session.execute(
        select(MenuItem.image_url).where(MenuItem.image_url.is_not(None))
    )
    paths = {store.path_from_url(url) for url in result.scalars().all()}
    paths.discard(None)
    return paths

async def find_orphan_assets(
    session: AsyncSession,
    store: AssetStore,
    cafe_id: int,
    referenced: Optional[Set[str]] = None
) -> List[str]:
    """
    Asset paths under the cafe prefix that no menu item references.
    Items moved to another cafe keep their old prefix, so references are
    looked up over all items, not only the ones currently in this cafe.
    """
    if referenced is None:
        referenced = await get_referenced_paths(session, store)
    stored = await store.list_paths(prefix=f"{cafe_id}/")
    return [path for path in stored if path not in referenced]

async def reconcile_cafe_assets(
    session: AsyncSession,
    store: AssetStore,
    cafe_id: int,
    dry_run: bool = False,
    referenced: Optional[Set[str]] = None
) -> List[str]:
    orphans = await find_orphan_assets(session, store, cafe_id, referenced)
    if not orphans:
        return []
    
    if dry_run:
        logger.info(f"Cafe {cafe_id}: {len(orphans)} orphan assets found (dry run)")
        return orphans
    
    removed = await store.remove(orphans)
    logger.info(f"Cafe {cafe_id}: removed {len(removed)} orphan assets")
    return removed

@store_errors
async def get_all_cafe_ids(session: AsyncSession) -> List[int]:
    result = await session.execute(select(Cafe.id).order_by(Cafe.id))
    return list(result.scalars().all())

async def reconcile_orphan_assets(session: AsyncSession, store: AssetStore, dry_run: bool = False) -> Dict[int, List[str]]:
    """
    Sweeps every cafe's asset prefix and removes files no item points to.
    A failing cafe is logged and skipped so the others still get cleaned.
    
    Returns:
        dict: cafe id -> removed (or, with dry_run, found) asset paths
    """
    report: Dict[int, List[str]] = {}
    referenced = await get_referenced_paths(session, store)
    
    for cafe_id in await get_all_cafe_ids(session):
        try:
            cleaned = await reconcile_cafe_assets(session, store, cafe_id, dry_run=dry_run, referenced=referenced)
        except StoreUnavailable as e:
            logger.error(f"Asset reconciliation for cafe {cafe_id} failed: {e}")
            continue
        if cleaned:
            report[cafe_id] = cleaned
    
    return report
