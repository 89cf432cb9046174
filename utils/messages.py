from typing import Sequence

def format_error_message(title: str, message: str = "", suggestion: str = "") -> str:
    result = f"❌ {title}"
    if message:
        result += f"\n\n{message}"
    if suggestion:
        result += f"\n\n💡 {suggestion}"
    return result

def format_warning_message(title: str, message: str = "") -> str:
    result = f"⚠️ {title}"
    if message:
        result += f"\n\n{message}"
    return result

def format_asset_warnings(warnings: Sequence[Exception]) -> str:
    if not warnings:
        return ""
    lines = "\n".join([f"• {w}" for w in warnings])
    return format_warning_message("Image storage needs attention", lines)
