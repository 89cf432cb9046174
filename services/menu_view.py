from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from models.category import Category
from models.menu_item import MenuItem
from services import menu_repository
from services.cafe_service import get_cafe_by_id
from utils.decorators import store_errors
from utils.exceptions import NotFound


@dataclass
class MenuSection:
    category: Category
    items: List[MenuItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return len(self.items)


def build_menu(categories: Sequence[Category], items: Sequence[MenuItem]) -> List[MenuSection]:
    """
    Groups flat item rows under their categories.

    Both inputs are expected in repository order; that order is kept as is.
    Every category gets a section, empty ones included. Items of unknown
    categories are dropped.
    """
    grouped: Dict[int, List[MenuItem]] = defaultdict(list)
    for item in items:
        grouped[item.category_id].append(item)

    return [MenuSection(category=category, items=list(grouped.get(category.id, []))) for category in categories]

def find_section(sections: Sequence[MenuSection], category_id: int) -> Optional[MenuSection]:
    for section in sections:
        if section.category.id == category_id:
            return section
    return None

async def load_menu(session: AsyncSession, owner_id: Optional[str], cafe_id: int) -> List[MenuSection]:
    categories = await menu_repository.list_categories(session, owner_id, cafe_id)
    items = await menu_repository.list_items(session, owner_id, cafe_id)
    return build_menu(categories, items)

@store_errors
async def load_public_menu(session: AsyncSession, cafe_id: int) -> List[MenuSection]:
    """Guest-facing menu: no identity needed, unavailable items hidden."""
    cafe = await get_cafe_by_id(session, cafe_id)
    if not cafe:
        raise NotFound(f"Cafe {cafe_id} not found")

    categories = await menu_repository.fetch_categories(session, cafe_id)
    items = await menu_repository.fetch_items(session, cafe_id, available_only=True)
    return build_menu(categories, items)
