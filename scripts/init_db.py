import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from database.database import init_db, get_session
from models.cafe import Cafe
from services.cafe_service import create_cafe
from services.menu_repository import create_category, create_item
from sqlalchemy import select

DEMO_MENU = [
    {
        "name": "Coffee",
        "description": "Freshly roasted every week",
        "items": [
            {"name": "Espresso", "description": "Double shot", "price": "2.50"},
            {"name": "Cappuccino", "description": "Espresso with steamed milk foam", "price": "3.90"},
            {"name": "Flat White", "description": "Velvety microfoam", "price": "4.20"},
        ],
    },
    {
        "name": "Breakfast",
        "description": "Served until noon",
        "items": [
            {"name": "Avocado Toast", "description": "Sourdough, lime, chili flakes", "price": "8.50"},
            {"name": "Granola Bowl", "description": "Yogurt, honey, seasonal fruit", "price": "6.90"},
        ],
    },
    {
        "name": "Desserts",
        "description": "Sweet endings",
        "items": [
            {"name": "Cheesecake", "description": "New York style", "price": "5.40"},
            {"name": "Lemon Tart", "description": None, "price": "4.80", "is_available": False},
        ],
    },
]

async def create_demo_data(owner_id: str, force: bool = False):
    """
    Creates a demo cafe with categories and items for the given owner.
    
    Args:
        owner_id: identity that will own the demo cafe
        force: create another demo cafe even if the owner already has one
    """
    print("[INFO] Initializing database...")
    await init_db()
    
    async for session in get_session():
        result = await session.execute(select(Cafe).where(Cafe.owner_id == owner_id))
        if result.scalars().first() and not force:
            print(f"[WARNING] Owner {owner_id} already has a cafe")
            print("[TIP] Use --force to create another demo cafe")
            return
        
        cafe = await create_cafe(
            session,
            owner_id,
            "Demo Cafe",
            description="A cozy place serving the best coffee in town",
            location="123 Main St",
            email="contact@democafe.example",
        )
        print(f"[OK] Cafe #{cafe.id} '{cafe.name}' created")
        
        for category_data in DEMO_MENU:
            category = await create_category(
                session, owner_id, cafe.id, category_data["name"], category_data["description"]
            )
            for item_data in category_data["items"]:
                await create_item(session, owner_id, category.id, **item_data)
            print(f"[OK] {category.name}: {len(category_data['items'])} items")
        
        print("\n[OK] Demo data ready")

if __name__ == "__main__":
    import argparse
    
    parser = argparse.ArgumentParser(description="Create a demo cafe menu")
    parser.add_argument("--owner", default="demo-owner", help="Owner identity of the demo cafe")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Create another demo cafe even if the owner already has one"
    )
    args = parser.parse_args()
    
    asyncio.run(create_demo_data(args.owner, force=args.force))
