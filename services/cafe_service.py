from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from loguru import logger
from models.cafe import Cafe
from utils.decorators import owner_required, store_errors
from utils.exceptions import NotAuthorized, NotFound, ValidationError
from utils.validators import validate_name
from typing import List, Optional

CAFE_PROFILE_FIELDS = ("name", "description", "location", "website", "email", "phone")

async def get_cafe_by_id(session: AsyncSession, cafe_id: int) -> Optional[Cafe]:
    result = await session.execute(select(Cafe).where(Cafe.id == cafe_id))
    return result.scalar_one_or_none()

@store_errors
@owner_required
async def get_owner_cafes(session: AsyncSession, owner_id: str) -> List[Cafe]:
    result = await session.execute(
        select(Cafe).where(Cafe.owner_id == owner_id).order_by(Cafe.name)
    )
    return list(result.scalars().all())

@store_errors
@owner_required
async def get_owned_cafe(session: AsyncSession, owner_id: str, cafe_id: int) -> Cafe:
    cafe = await get_cafe_by_id(session, cafe_id)
    if not cafe:
        raise NotFound(f"Cafe {cafe_id} not found")
    if cafe.owner_id != owner_id:
        logger.warning(f"Owner {owner_id} tried to access cafe {cafe_id}")
        raise NotAuthorized("You do not have access to this cafe")
    return cafe

@store_errors
@owner_required
async def create_cafe(
    session: AsyncSession,
    owner_id: str,
    name: str,
    description: Optional[str] = None,
    location: Optional[str] = None,
    website: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None
) -> Cafe:
    is_valid, error_msg = validate_name(name, "Cafe name")
    if not is_valid:
        raise ValidationError(error_msg, field="name")
    
    cafe = Cafe(
        owner_id=owner_id,
        name=name.strip(),
        description=description,
        location=location,
        website=website,
        email=email,
        phone=phone
    )
    session.add(cafe)
    await session.commit()
    await session.refresh(cafe)
    logger.info(f"Cafe {cafe.id} '{cafe.name}' created for owner {owner_id}")
    return cafe

@store_errors
@owner_required
async def update_cafe(session: AsyncSession, owner_id: str, cafe_id: int, **fields) -> Cafe:
    cafe = await get_owned_cafe(session, owner_id, cafe_id)
    
    changes = {}
    for key, value in fields.items():
        if key not in CAFE_PROFILE_FIELDS:
            raise ValidationError(f"Field '{key}' cannot be updated", field=key)
        if key == "name":
            is_valid, error_msg = validate_name(value, "Cafe name")
            if not is_valid:
                raise ValidationError(error_msg, field="name")
            value = value.strip()
        changes[key] = value
    
    for key, value in changes.items():
        setattr(cafe, key, value)
    
    await session.commit()
    await session.refresh(cafe)
    return cafe
