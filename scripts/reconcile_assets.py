"""
Removes image assets that no menu item references anymore.
Same job as the scheduled reconciliation, run once from the command line.
"""
import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from database.database import init_db, get_session
from services.asset_store import LocalAssetStore
from services.reconcile_service import reconcile_orphan_assets

async def run(dry_run: bool):
    await init_db()
    store = LocalAssetStore()
    
    async for session in get_session():
        report = await reconcile_orphan_assets(session, store, dry_run=dry_run)
    
    if not report:
        print("[OK] No orphan assets")
        return
    
    verb = "Found" if dry_run else "Removed"
    for cafe_id, paths in report.items():
        print(f"Cafe #{cafe_id}: {verb.lower()} {len(paths)} assets")
        for path in paths:
            print(f"  {path}")
    print(f"\n[OK] {verb} {sum(len(p) for p in report.values())} orphan assets")

if __name__ == "__main__":
    import argparse
    
    parser = argparse.ArgumentParser(description="Remove orphan menu images")
    parser.add_argument("--dry-run", action="store_true", help="Only list orphan assets")
    args = parser.parse_args()
    
    asyncio.run(run(args.dry_run))
