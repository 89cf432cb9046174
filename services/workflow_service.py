"""
Menu management workflow for one cafe.

Form state is an explicit value held by MenuWorkflow:

    Idle -> Creating / Editing -> Submitting -> Idle        (success)
                                             -> Creating / Editing with error (failure)

Only one form is open at a time. Opening a new one discards the previous
form. Required fields are checked locally before any store call, and after
every successful mutation the whole menu is re-read from the repository.
"""
import enum
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union
from sqlalchemy.ext.asyncio import async_sessionmaker
from loguru import logger
from database.database import get_session_factory
from models.category import Category
from models.menu_item import MenuItem
from services import image_service, menu_repository
from services.asset_store import AssetStore
from services.image_service import ImageUpload, ImageOperationResult
from services.menu_view import MenuSection, load_menu
from utils.exceptions import (
    AssetOrphanRisk,
    MenuError,
    NotAuthorized,
    NotFound,
    StoreUnavailable,
    WorkflowStateError,
)
from utils.messages import format_asset_warnings, format_error_message
from utils.validators import validate_category_form, validate_item_form

GENERIC_DENIAL = "You are not allowed to change this menu."

CATEGORY_FIELDS = ("name", "description")
ITEM_FIELDS = ("name", "description", "price", "category_id", "is_available")


class FormKind(enum.Enum):
    CATEGORY = "category"
    ITEM = "item"


@dataclass(frozen=True)
class Idle:
    notice: Optional[str] = None
    error: Optional[str] = None
    warnings: Tuple[AssetOrphanRisk, ...] = ()

    @property
    def warning_message(self) -> str:
        return format_asset_warnings(self.warnings)


@dataclass(frozen=True)
class Creating:
    kind: FormKind
    fields: Dict[str, Any]
    image: Optional[ImageUpload] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Editing:
    kind: FormKind
    entity_id: int
    fields: Dict[str, Any]
    image: Optional[ImageUpload] = None
    remove_image: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class Submitting:
    action: str
    form: Optional[Union[Creating, Editing]] = None


FormState = Union[Idle, Creating, Editing, Submitting]


def describe_error(error: MenuError) -> str:
    if isinstance(error, NotAuthorized):
        return format_error_message("Access denied", GENERIC_DENIAL)
    if isinstance(error, StoreUnavailable):
        return format_error_message(
            "Could not save changes",
            str(error),
            "Check your connection and submit again."
        )
    if isinstance(error, NotFound):
        return format_error_message("Not found", str(error), "Reload the menu and try again.")
    return str(error)


class MenuWorkflow:
    def __init__(
        self,
        cafe_id: int,
        asset_store: AssetStore,
        get_current_owner: Callable[[], Optional[str]],
        session_factory: Optional[async_sessionmaker] = None
    ):
        self.cafe_id = cafe_id
        self.asset_store = asset_store
        self._get_current_owner = get_current_owner
        self._session_factory = session_factory
        self.state: FormState = Idle()
        self.sections: List[MenuSection] = []
        self.load_error: Optional[str] = None

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    @property
    def categories(self) -> List[Category]:
        return [section.category for section in self.sections]

    @property
    def items(self) -> List[MenuItem]:
        return [item for section in self.sections for item in section.items]

    @property
    def is_busy(self) -> bool:
        return isinstance(self.state, Submitting)

    async def refresh(self) -> List[MenuSection]:
        """Re-reads categories and items. On failure the previous sections stay and load_error is set."""
        try:
            async with self.session_factory() as session:
                self.sections = await load_menu(session, self._get_current_owner(), self.cafe_id)
            self.load_error = None
        except MenuError as e:
            logger.error(f"Could not load menu of cafe {self.cafe_id}: {e}")
            self.load_error = describe_error(e)
        return self.sections

    def _find_category(self, category_id: int) -> Category:
        for category in self.categories:
            if category.id == category_id:
                return category
        raise NotFound(f"Category {category_id} not found")

    def _find_item(self, item_id: int) -> MenuItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise NotFound(f"Menu item {item_id} not found")

    def _open(self, form: Union[Creating, Editing]) -> Union[Creating, Editing]:
        if self.is_busy:
            raise WorkflowStateError("A submission is already in progress")
        if isinstance(self.state, (Creating, Editing)):
            logger.debug(f"Discarding open {self.state.kind.value} form")
        self.state = form
        return form

    def _current_form(self) -> Union[Creating, Editing]:
        if self.is_busy:
            raise WorkflowStateError("A submission is already in progress")
        if not isinstance(self.state, (Creating, Editing)):
            raise WorkflowStateError("No form is open")
        return self.state

    def start_create_category(self) -> Creating:
        return self._open(Creating(kind=FormKind.CATEGORY, fields={"name": "", "description": ""}))

    def start_create_item(self, category_id: Optional[int] = None) -> Creating:
        if not self.categories:
            raise WorkflowStateError("Create a category before adding menu items")
        return self._open(Creating(
            kind=FormKind.ITEM,
            fields={
                "name": "",
                "description": "",
                "price": "",
                "category_id": category_id,
                "is_available": True,
            }
        ))

    def start_edit_category(self, category_id: int) -> Editing:
        category = self._find_category(category_id)
        return self._open(Editing(
            kind=FormKind.CATEGORY,
            entity_id=category.id,
            fields={"name": category.name, "description": category.description or ""}
        ))

    def start_edit_item(self, item_id: int) -> Editing:
        item = self._find_item(item_id)
        return self._open(Editing(
            kind=FormKind.ITEM,
            entity_id=item.id,
            fields={
                "name": item.name,
                "description": item.description or "",
                "price": str(item.price),
                "category_id": item.category_id,
                "is_available": bool(item.is_available),
            }
        ))

    def set_field(self, name: str, value: Any) -> Union[Creating, Editing]:
        form = self._current_form()
        allowed = CATEGORY_FIELDS if form.kind is FormKind.CATEGORY else ITEM_FIELDS
        if name not in allowed:
            raise WorkflowStateError(f"Unknown {form.kind.value} field '{name}'")
        self.state = replace(form, fields={**form.fields, name: value}, error=None)
        return self.state

    def attach_image(self, filename: str, content: bytes) -> Union[Creating, Editing]:
        form = self._current_form()
        if form.kind is not FormKind.ITEM:
            raise WorkflowStateError("Only menu items can have an image")
        changes = {"image": ImageUpload(filename=filename, content=content), "error": None}
        if isinstance(form, Editing):
            changes["remove_image"] = False
        self.state = replace(form, **changes)
        return self.state

    def clear_image(self) -> Editing:
        form = self._current_form()
        if not isinstance(form, Editing) or form.kind is not FormKind.ITEM:
            raise WorkflowStateError("Only an edited menu item can drop its image")
        self.state = replace(form, image=None, remove_image=True, error=None)
        return self.state

    def cancel(self) -> Idle:
        if self.is_busy:
            raise WorkflowStateError("A submission is already in progress")
        self.state = Idle()
        return self.state

    async def submit(self) -> bool:
        form = self._current_form()

        if form.kind is FormKind.CATEGORY:
            is_valid, error_msg = validate_category_form(form.fields)
        else:
            is_valid, error_msg = validate_item_form(form.fields)
        if not is_valid:
            self.state = replace(form, error=error_msg)
            return False

        owner_id = self._get_current_owner()
        self.state = Submitting(action=f"save_{form.kind.value}", form=form)
        try:
            notice, warnings = await self._save(form, owner_id)
        except MenuError as e:
            logger.warning(f"Saving {form.kind.value} form failed: {e}")
            self.state = replace(form, error=describe_error(e))
            return False
        except Exception:
            self.state = form
            raise

        self.state = Idle(notice=notice, warnings=tuple(warnings))
        if warnings:
            logger.warning(self.state.warning_message)
        await self.refresh()
        return True

    async def _save(self, form: Union[Creating, Editing], owner_id: Optional[str]) -> Tuple[str, List[AssetOrphanRisk]]:
        fields = dict(form.fields)
        async with self.session_factory() as session:
            if form.kind is FormKind.CATEGORY and isinstance(form, Creating):
                await menu_repository.create_category(
                    session, owner_id, self.cafe_id, fields["name"], fields.get("description")
                )
                return "Category created successfully!", []

            if form.kind is FormKind.CATEGORY:
                await menu_repository.update_category(session, owner_id, form.entity_id, **fields)
                return "Category updated successfully!", []

            if isinstance(form, Creating):
                result = await image_service.create_item_with_image(
                    session, self.asset_store, owner_id, fields, form.image
                )
                return "Menu item created successfully!", result.warnings

            result = await image_service.update_item_with_image(
                session, self.asset_store, owner_id, form.entity_id, fields,
                image=form.image, remove_image=form.remove_image
            )
            return "Menu item updated successfully!", result.warnings

    async def _run_action(
        self,
        action: str,
        operation: Callable[[Any, Optional[str]], Awaitable[Optional[ImageOperationResult]]],
        notice: str
    ) -> bool:
        if self.is_busy:
            raise WorkflowStateError("A submission is already in progress")
        if isinstance(self.state, (Creating, Editing)):
            logger.debug(f"Closing open {self.state.kind.value} form for {action}")

        owner_id = self._get_current_owner()
        self.state = Submitting(action=action)
        try:
            async with self.session_factory() as session:
                result = await operation(session, owner_id)
        except MenuError as e:
            logger.warning(f"{action} failed: {e}")
            self.state = Idle(error=describe_error(e))
            return False
        except Exception:
            self.state = Idle()
            raise

        warnings = tuple(result.warnings) if isinstance(result, ImageOperationResult) else ()
        self.state = Idle(notice=notice, warnings=warnings)
        if warnings:
            logger.warning(self.state.warning_message)
        await self.refresh()
        return True

    async def delete_item(self, item_id: int) -> bool:
        async def operation(session, owner_id):
            return await image_service.delete_item_with_image(session, self.asset_store, owner_id, item_id)

        return await self._run_action("delete_item", operation, "Menu item deleted")

    async def delete_category(self, category_id: int) -> bool:
        async def operation(session, owner_id):
            await menu_repository.delete_category(session, owner_id, category_id)

        return await self._run_action("delete_category", operation, "Category deleted")

    async def toggle_item_availability(self, item_id: int) -> bool:
        item = self._find_item(item_id)
        make_available = not item.is_available

        async def operation(session, owner_id):
            await menu_repository.set_item_availability(session, owner_id, item_id, make_available)

        notice = "Item is available again" if make_available else "Item marked as unavailable"
        return await self._run_action("toggle_item_availability", operation, notice)
