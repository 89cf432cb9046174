import pytest
from decimal import Decimal
from models.category import Category
from models.menu_item import MenuItem
from services.menu_view import build_menu
from utils.formatters import format_price, format_menu
from utils.messages import format_error_message, format_asset_warnings
from utils.exceptions import AssetOrphanRisk

class TestFormatPrice:
    def test_two_decimals(self):
        assert format_price(Decimal("12.9")) == "$12.90"
        assert format_price(Decimal("0")) == "$0.00"
    
    def test_missing_price(self):
        assert format_price(None) == "-"

class TestFormatMenu:
    def test_format_menu(self):
        coffee = Category(id=1, cafe_id=1, name="Coffee", description="Freshly roasted", sort_order=0)
        cakes = Category(id=2, cafe_id=1, name="Cakes", sort_order=1)
        latte = MenuItem(id=1, category_id=1, name="Latte", price=Decimal("3.90"), is_available=True, sort_order=0)
        tart = MenuItem(id=2, category_id=1, name="Lemon Tart", price=Decimal("4.80"), is_available=False, sort_order=1)
        
        result = format_menu(build_menu([coffee, cakes], [latte, tart]))
        
        assert "Coffee" in result
        assert "Freshly roasted" in result
        assert "Latte .... $3.90" in result
        assert "Lemon Tart [Unavailable]" in result
        assert "No items in this category yet." in result
    
    def test_no_categories(self):
        assert format_menu([]) == "No categories yet."

class TestMessages:
    def test_error_message(self):
        result = format_error_message("Could not save changes", "timeout", "Try again")
        assert result.startswith("❌ Could not save changes")
        assert "timeout" in result
        assert "💡 Try again" in result
    
    def test_asset_warnings(self):
        assert format_asset_warnings([]) == ""
        result = format_asset_warnings([AssetOrphanRisk("Could not delete image 1/a.png", path="1/a.png")])
        assert "1/a.png" in result
