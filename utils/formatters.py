from decimal import Decimal
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from services.menu_view import MenuSection

def format_price(price: Decimal | float | None) -> str:
    if price is None:
        return "-"
    return f"${Decimal(str(price)):.2f}"

def format_menu(sections: List["MenuSection"]) -> str:
    """Plain-text rendering of the category -> items tree"""
    if not sections:
        return "No categories yet."
    
    blocks = []
    for section in sections:
        lines = [section.category.name]
        if section.category.description:
            lines.append(f"  {section.category.description}")
        if section.is_empty:
            lines.append("  No items in this category yet.")
        for item in section.items:
            marker = "" if item.is_available else " [Unavailable]"
            lines.append(f"  - {item.name}{marker} .... {format_price(item.price)}")
            if item.description:
                lines.append(f"      {item.description}")
        blocks.append("\n".join(lines))
    
    return "\n\n".join(blocks)
