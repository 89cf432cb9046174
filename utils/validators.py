from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import PurePosixPath
from typing import Any, Optional, Tuple
from config.settings import settings
from utils.exceptions import ValidationError

PRICE_QUANT = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")

def validate_name(name: Optional[str], label: str = "Name") -> Tuple[bool, str]:
    if name is None or not str(name).strip():
        return False, f"{label} is required"
    return True, ""

def parse_price(value: Any) -> Decimal:
    """
    Normalizes user supplied price text ("12.9", "12,90", " 7 ") into a
    two-decimal Decimal. Raises ValidationError for anything non-numeric or negative.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Price is required", field="price")
    
    text = str(value).strip().replace(",", ".")
    if not text:
        raise ValidationError("Price is required", field="price")
    
    try:
        price = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Price must be a number, got '{value}'", field="price")
    
    if not price.is_finite():
        raise ValidationError(f"Price must be a number, got '{value}'", field="price")
    if price < 0:
        raise ValidationError("Price cannot be negative", field="price")
    if price > MAX_PRICE:
        raise ValidationError("Price is too large", field="price")
    
    # abs() folds "-0" into 0.00
    return abs(price.quantize(PRICE_QUANT, rounding=ROUND_HALF_UP))

def validate_price(value: Any) -> Tuple[bool, str]:
    try:
        parse_price(value)
    except ValidationError as e:
        return False, str(e)
    return True, ""

def validate_category_form(fields: dict) -> Tuple[bool, str]:
    return validate_name(fields.get("name"), "Category name")

def validate_item_form(fields: dict) -> Tuple[bool, str]:
    is_valid, error_msg = validate_name(fields.get("name"), "Item name")
    if not is_valid:
        return is_valid, error_msg
    
    is_valid, error_msg = validate_price(fields.get("price"))
    if not is_valid:
        return is_valid, error_msg
    
    if not fields.get("category_id"):
        return False, "Category is required"
    
    return True, ""

def validate_image_upload(filename: str, content: bytes) -> Tuple[bool, str]:
    if not content:
        return False, "Image file is empty"
    if len(content) > settings.ASSET_MAX_BYTES:
        max_mb = settings.ASSET_MAX_BYTES / (1024 * 1024)
        return False, f"Image is too large. Maximum size: {max_mb:.0f}MB"
    
    extension = PurePosixPath(filename or "").suffix.lower().lstrip(".")
    if extension not in settings.ALLOWED_IMAGE_EXTENSIONS:
        allowed = ", ".join(settings.ALLOWED_IMAGE_EXTENSIONS)
        return False, f"Unsupported image type '{extension or filename}'. Allowed: {allowed}"
    
    return True, ""
