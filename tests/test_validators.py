import pytest
from decimal import Decimal
from utils.exceptions import ValidationError
from utils.validators import (
    validate_name,
    parse_price,
    validate_price,
    validate_category_form,
    validate_item_form,
    validate_image_upload
)

class TestValidateName:
    def test_empty_name(self):
        is_valid, error_msg = validate_name("   ", "Category name")
        assert not is_valid
        assert "Category name is required" == error_msg
    
    def test_missing_name(self):
        is_valid, error_msg = validate_name(None)
        assert not is_valid
    
    def test_valid_name(self):
        is_valid, error_msg = validate_name("Desserts")
        assert is_valid
        assert error_msg == ""

class TestParsePrice:
    def test_decimal_text(self):
        assert parse_price("12.9") == Decimal("12.9")
        assert parse_price("12.9") == Decimal("12.90")
    
    def test_comma_separator(self):
        assert parse_price("3,50") == Decimal("3.50")
    
    def test_whitespace_and_integer(self):
        assert parse_price(" 7 ") == Decimal("7.00")
    
    def test_zero_is_allowed(self):
        assert parse_price("0") == Decimal("0.00")
    
    def test_negative_zero_is_plain_zero(self):
        price = parse_price("-0")
        assert price == Decimal("0.00")
        assert not price.is_signed()
        assert str(price) == "0.00"
    
    def test_rounds_to_cents(self):
        assert parse_price("2.345") == Decimal("2.35")
    
    def test_numeric_input(self):
        assert parse_price(4.2) == Decimal("4.20")
    
    def test_non_numeric(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_price("abc")
        assert exc_info.value.field == "price"
        assert "must be a number" in str(exc_info.value)
    
    def test_negative(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_price("-1")
        assert "negative" in str(exc_info.value)
    
    def test_empty(self):
        with pytest.raises(ValidationError):
            parse_price("")
    
    def test_not_finite(self):
        with pytest.raises(ValidationError):
            parse_price("NaN")
        with pytest.raises(ValidationError):
            parse_price("Infinity")
    
    def test_validate_price_tuple(self):
        assert validate_price("1.5") == (True, "")
        is_valid, error_msg = validate_price("abc")
        assert not is_valid
        assert error_msg

class TestForms:
    def test_category_form(self):
        assert validate_category_form({"name": "Drinks"})[0]
        assert not validate_category_form({"name": ""})[0]
    
    def test_item_form_requires_category(self):
        is_valid, error_msg = validate_item_form({"name": "Latte", "price": "3.5", "category_id": None})
        assert not is_valid
        assert "Category" in error_msg
    
    def test_item_form_bad_price(self):
        is_valid, error_msg = validate_item_form({"name": "Latte", "price": "abc", "category_id": 1})
        assert not is_valid
        assert "Price" in error_msg
    
    def test_item_form_valid(self):
        assert validate_item_form({"name": "Latte", "price": "3.5", "category_id": 1}) == (True, "")

class TestValidateImageUpload:
    def test_empty_file(self):
        is_valid, error_msg = validate_image_upload("photo.jpg", b"")
        assert not is_valid
        assert "empty" in error_msg
    
    def test_unsupported_extension(self):
        is_valid, error_msg = validate_image_upload("menu.pdf", b"%PDF")
        assert not is_valid
        assert "Unsupported" in error_msg
    
    def test_too_large(self):
        from config.settings import settings
        is_valid, error_msg = validate_image_upload("photo.png", b"x" * (settings.ASSET_MAX_BYTES + 1))
        assert not is_valid
        assert "too large" in error_msg
    
    def test_valid_upload(self):
        assert validate_image_upload("Photo.JPG", b"\xff\xd8\xff") == (True, "")
