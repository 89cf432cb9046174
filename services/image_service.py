"""
Keeps MenuItem.image_url and the asset store in step.

The two stores are written one after the other without a transaction, so
every path here uses compensating actions: an asset written for a record
that then fails to save is removed again, and asset deletions that fail
after the record changed are reported as AssetOrphanRisk warnings instead
of blocking the record operation.
"""
from dataclasses import dataclass, field
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger
from models.menu_item import MenuItem
from services.asset_store import AssetStore, build_asset_path
from services import menu_repository
from utils.exceptions import AssetOrphanRisk, MenuError, StoreUnavailable, ValidationError
from utils.validators import validate_image_upload, validate_name, parse_price


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content: bytes


@dataclass
class ImageOperationResult:
    item: Optional[MenuItem]
    warnings: List[AssetOrphanRisk] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


def _check_upload(image: ImageUpload) -> None:
    is_valid, error_msg = validate_image_upload(image.filename, image.content)
    if not is_valid:
        raise ValidationError(error_msg, field="image")

def _check_item_fields(fields: dict, partial: bool) -> None:
    if not partial or "name" in fields:
        is_valid, error_msg = validate_name(fields.get("name"), "Item name")
        if not is_valid:
            raise ValidationError(error_msg, field="name")
    if not partial or "price" in fields:
        parse_price(fields.get("price"))
    if not partial and not fields.get("category_id"):
        raise ValidationError("Category is required", field="category_id")

async def _upload(store: AssetStore, cafe_id: int, image: ImageUpload) -> tuple[str, str]:
    path = build_asset_path(cafe_id, image.filename)
    uploaded = await store.upload(path, image.content)
    return uploaded["path"], store.get_public_url(uploaded["path"])

async def _remove_quietly(store: AssetStore, path: str, reason: str) -> Optional[AssetOrphanRisk]:
    try:
        await store.remove([path])
    except MenuError as e:
        logger.warning(f"Asset {path} left behind ({reason}): {e}")
        return AssetOrphanRisk(f"Could not delete image {path}: {e}", path=path)
    return None

async def _discard_new_asset(store: AssetStore, path: str) -> None:
    orphan = await _remove_quietly(store, path, "record write failed")
    if orphan:
        logger.warning(f"Reconciliation needed for {orphan.path}")


async def create_item_with_image(
    session: AsyncSession,
    store: AssetStore,
    owner_id: Optional[str],
    fields: dict,
    image: Optional[ImageUpload] = None
) -> ImageOperationResult:
    """
    Uploads the optional image under the owning cafe's prefix, then inserts
    the item with its public URL. The upload is removed again if the insert fails.
    """
    if image is None:
        item = await menu_repository.create_item(session, owner_id, **fields)
        return ImageOperationResult(item=item)

    _check_item_fields(fields, partial=False)
    _check_upload(image)
    category = await menu_repository.get_owned_category(session, owner_id, fields.get("category_id"))

    path, url = await _upload(store, category.cafe_id, image)
    try:
        item = await menu_repository.create_item(session, owner_id, **{**fields, "image_url": url})
    except Exception:
        await _discard_new_asset(store, path)
        raise

    return ImageOperationResult(item=item)

async def update_item_with_image(
    session: AsyncSession,
    store: AssetStore,
    owner_id: Optional[str],
    item_id: int,
    fields: dict,
    image: Optional[ImageUpload] = None,
    remove_image: bool = False
) -> ImageOperationResult:
    """
    Updates an item and optionally replaces or removes its image.

    Replacement order: upload new asset, update record, delete old asset.
    The old asset goes last, not first, so a failed record write never
    leaves the item pointing at a deleted image.
    Without a new image and without remove_image the stored image_url is
    left untouched.
    """
    fields = {k: v for k, v in fields.items() if k != "image_url"}
    warnings: List[AssetOrphanRisk] = []

    _check_item_fields(fields, partial=True)
    if image is not None:
        _check_upload(image)

    item = await menu_repository.get_owned_item(session, owner_id, item_id)
    old_url = item.image_url
    old_path = store.path_from_url(old_url)

    new_path = None
    if image is not None:
        target_category_id = fields.get("category_id") or item.category_id
        category = await menu_repository.get_owned_category(session, owner_id, target_category_id)
        try:
            new_path, new_url = await _upload(store, category.cafe_id, image)
            fields["image_url"] = new_url
        except StoreUnavailable as e:
            logger.warning(f"Image upload for menu item {item_id} failed, keeping previous image: {e}")
            warnings.append(AssetOrphanRisk(f"New image was not saved: {e}"))
    elif remove_image:
        fields["image_url"] = None

    try:
        item = await menu_repository.update_item(session, owner_id, item_id, **fields)
    except Exception:
        if new_path:
            await _discard_new_asset(store, new_path)
        raise

    image_changed = "image_url" in fields and fields["image_url"] != old_url
    if image_changed and old_path:
        orphan = await _remove_quietly(store, old_path, f"replaced on menu item {item_id}")
        if orphan:
            warnings.append(orphan)
    elif image_changed and old_url:
        logger.info(f"Previous image of menu item {item_id} is not managed by this store: {old_url}")

    return ImageOperationResult(item=item, warnings=warnings)

async def delete_item_with_image(
    session: AsyncSession,
    store: AssetStore,
    owner_id: Optional[str],
    item_id: int
) -> ImageOperationResult:
    """Best-effort asset delete, then the row is deleted regardless of the asset outcome."""
    warnings: List[AssetOrphanRisk] = []

    item = await menu_repository.get_owned_item(session, owner_id, item_id)
    path = store.path_from_url(item.image_url)

    if path:
        orphan = await _remove_quietly(store, path, f"menu item {item_id} deleted")
        if orphan:
            warnings.append(orphan)
    elif item.image_url:
        logger.info(f"Image of menu item {item_id} is not managed by this store, skipping delete")

    await menu_repository.delete_item(session, owner_id, item_id)
    return ImageOperationResult(item=None, warnings=warnings)
