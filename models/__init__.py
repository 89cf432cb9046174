from .cafe import Cafe
from .category import Category
from .menu_item import MenuItem

__all__ = [
    "Cafe",
    "Category",
    "MenuItem"
]
