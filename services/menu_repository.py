from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from loguru import logger
from models.cafe import Cafe
from models.category import Category
from models.menu_item import MenuItem
from services.cafe_service import get_owned_cafe
from utils.decorators import owner_required, store_errors
from utils.exceptions import NotAuthorized, NotFound, ValidationError
from utils.validators import validate_name, parse_price
from typing import List, Optional, Any

UPDATABLE_ITEM_FIELDS = ("name", "description", "price", "category_id", "is_available", "image_url")
UPDATABLE_CATEGORY_FIELDS = ("name", "description")

def _clean_name(name: Optional[str], label: str) -> str:
    is_valid, error_msg = validate_name(name, label)
    if not is_valid:
        raise ValidationError(error_msg, field="name")
    return name.strip()

async def fetch_categories(session: AsyncSession, cafe_id: int) -> List[Category]:
    result = await session.execute(
        select(Category)
        .where(Category.cafe_id == cafe_id)
        .order_by(Category.sort_order, Category.id)
    )
    return list(result.scalars().all())

async def fetch_items(
    session: AsyncSession,
    cafe_id: int,
    category_id: Optional[int] = None,
    available_only: bool = False
) -> List[MenuItem]:
    query = (
        select(MenuItem)
        .join(Category, MenuItem.category_id == Category.id)
        .where(Category.cafe_id == cafe_id)
    )
    if category_id is not None:
        query = query.where(MenuItem.category_id == category_id)
    if available_only:
        query = query.where(MenuItem.is_available == True)
    query = query.order_by(MenuItem.sort_order, MenuItem.id)
    result = await session.execute(query)
    return list(result.scalars().all())

async def count_categories(session: AsyncSession, cafe_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(Category).where(Category.cafe_id == cafe_id)
    )
    return result.scalar_one()

async def count_items(session: AsyncSession, category_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(MenuItem).where(MenuItem.category_id == category_id)
    )
    return result.scalar_one()

@store_errors
@owner_required
async def get_owned_category(session: AsyncSession, owner_id: str, category_id: Any) -> Category:
    result = await session.execute(
        select(Category, Cafe.owner_id)
        .join(Cafe, Category.cafe_id == Cafe.id)
        .where(Category.id == category_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound(f"Category {category_id} not found")

    category, category_owner = row
    if category_owner != owner_id:
        logger.warning(f"Owner {owner_id} tried to access category {category_id}")
        raise NotAuthorized("You do not have access to this category")
    return category

@store_errors
@owner_required
async def get_owned_item(session: AsyncSession, owner_id: str, item_id: Any) -> MenuItem:
    result = await session.execute(
        select(MenuItem, Cafe.owner_id)
        .join(Category, MenuItem.category_id == Category.id)
        .join(Cafe, Category.cafe_id == Cafe.id)
        .where(MenuItem.id == item_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound(f"Menu item {item_id} not found")

    item, item_owner = row
    if item_owner != owner_id:
        logger.warning(f"Owner {owner_id} tried to access menu item {item_id}")
        raise NotAuthorized("You do not have access to this menu item")
    return item

@store_errors
@owner_required
async def list_categories(session: AsyncSession, owner_id: str, cafe_id: int) -> List[Category]:
    await get_owned_cafe(session, owner_id, cafe_id)
    return await fetch_categories(session, cafe_id)

@store_errors
@owner_required
async def list_items(
    session: AsyncSession,
    owner_id: str,
    cafe_id: int,
    category_id: Optional[int] = None
) -> List[MenuItem]:
    await get_owned_cafe(session, owner_id, cafe_id)
    return await fetch_items(session, cafe_id, category_id)

@store_errors
@owner_required
async def create_category(
    session: AsyncSession,
    owner_id: str,
    cafe_id: int,
    name: str,
    description: Optional[str] = None
) -> Category:
    name = _clean_name(name, "Category name")
    await get_owned_cafe(session, owner_id, cafe_id)

    # append-only ordinal; concurrent creators can collide until renumber_categories
    sort_order = await count_categories(session, cafe_id)
    category = Category(
        cafe_id=cafe_id,
        name=name,
        description=description or None,
        sort_order=sort_order
    )
    session.add(category)
    await session.commit()
    await session.refresh(category)
    logger.info(f"Category {category.id} '{category.name}' created in cafe {cafe_id} at position {sort_order}")
    return category

@store_errors
@owner_required
async def update_category(session: AsyncSession, owner_id: str, category_id: int, **fields: Any) -> Category:
    category = await get_owned_category(session, owner_id, category_id)

    changes = {}
    for key, value in fields.items():
        if key not in UPDATABLE_CATEGORY_FIELDS:
            raise ValidationError(f"Field '{key}' cannot be updated", field=key)
        if key == "name":
            value = _clean_name(value, "Category name")
        changes[key] = value

    for key, value in changes.items():
        setattr(category, key, value)

    await session.commit()
    await session.refresh(category)
    logger.info(f"Category {category_id} updated: {sorted(fields)}")
    return category

@store_errors
@owner_required
async def delete_category(session: AsyncSession, owner_id: str, category_id: int) -> None:
    category = await get_owned_category(session, owner_id, category_id)

    item_count = await count_items(session, category_id)
    if item_count:
        raise ValidationError(
            f"Category '{category.name}' still has {item_count} items. Move or delete them first.",
            field="category_id"
        )

    await session.delete(category)
    await session.commit()
    logger.info(f"Category {category_id} deleted")

@store_errors
@owner_required
async def create_item(
    session: AsyncSession,
    owner_id: str,
    category_id: Any,
    name: str,
    price: Any,
    description: Optional[str] = None,
    is_available: bool = True,
    image_url: Optional[str] = None
) -> MenuItem:
    name = _clean_name(name, "Item name")
    price = parse_price(price)
    if not category_id:
        raise ValidationError("Category is required", field="category_id")

    category = await get_owned_category(session, owner_id, category_id)

    sort_order = await count_items(session, category.id)
    item = MenuItem(
        category_id=category.id,
        name=name,
        description=description or None,
        price=price,
        is_available=bool(is_available),
        sort_order=sort_order,
        image_url=image_url
    )
    session.add(item)
    await session.commit()
    await session.refresh(item)
    logger.info(f"Menu item {item.id} '{item.name}' created in category {category.id} at position {sort_order}")
    return item

@store_errors
@owner_required
async def update_item(session: AsyncSession, owner_id: str, item_id: int, **fields: Any) -> MenuItem:
    """
    Partial update. sort_order is kept as is, also when the item moves to
    another category.
    """
    item = await get_owned_item(session, owner_id, item_id)

    changes = {}
    for key, value in fields.items():
        if key not in UPDATABLE_ITEM_FIELDS:
            raise ValidationError(f"Field '{key}' cannot be updated", field=key)
        if key == "name":
            value = _clean_name(value, "Item name")
        elif key == "price":
            value = parse_price(value)
        elif key == "is_available":
            value = bool(value)
        elif key == "category_id":
            if not value:
                raise ValidationError("Category is required", field="category_id")
            value = (await get_owned_category(session, owner_id, value)).id
        changes[key] = value

    for key, value in changes.items():
        setattr(item, key, value)

    await session.commit()
    await session.refresh(item)
    logger.info(f"Menu item {item_id} updated: {sorted(changes)}")
    return item

async def set_item_availability(session: AsyncSession, owner_id: str, item_id: int, is_available: bool) -> MenuItem:
    return await update_item(session, owner_id, item_id, is_available=is_available)

@store_errors
@owner_required
async def delete_item(session: AsyncSession, owner_id: str, item_id: int) -> None:
    """Removes the row only. Asset cleanup belongs to services.image_service."""
    item = await get_owned_item(session, owner_id, item_id)

    await session.delete(item)
    await session.commit()
    logger.info(f"Menu item {item_id} deleted")

@store_errors
@owner_required
async def renumber_categories(session: AsyncSession, owner_id: str, cafe_id: int) -> List[Category]:
    """Rewrites category ordinals densely from 0 keeping the current display order."""
    await get_owned_cafe(session, owner_id, cafe_id)
    categories = await fetch_categories(session, cafe_id)

    for index, category in enumerate(categories):
        category.sort_order = index

    await session.commit()
    logger.info(f"Renumbered {len(categories)} categories in cafe {cafe_id}")
    return categories

@store_errors
@owner_required
async def renumber_items(session: AsyncSession, owner_id: str, category_id: int) -> List[MenuItem]:
    category = await get_owned_category(session, owner_id, category_id)
    items = await fetch_items(session, category.cafe_id, category_id)

    for index, item in enumerate(items):
        item.sort_order = index

    await session.commit()
    logger.info(f"Renumbered {len(items)} items in category {category_id}")
    return items
