import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./cafe_menu.db")
    ASSET_STORAGE_ROOT: str = os.getenv("ASSET_STORAGE_ROOT", "./storage")
    ASSET_PUBLIC_BASE_URL: str = os.getenv(
        "ASSET_PUBLIC_BASE_URL", "http://localhost:8000/storage/v1/object/public"
    )
    ASSET_BUCKET: str = os.getenv("ASSET_BUCKET", "menu-images")
    ASSET_MAX_BYTES: int = int(os.getenv("ASSET_MAX_BYTES", str(5 * 1024 * 1024)))
    ALLOWED_IMAGE_EXTENSIONS: list[str] = [
        ext.strip().lower().lstrip(".")
        for ext in os.getenv("ALLOWED_IMAGE_EXTENSIONS", "jpg,jpeg,png,webp,gif").split(",")
        if ext.strip()
    ]
    RECONCILE_INTERVAL_MINUTES: int = int(os.getenv("RECONCILE_INTERVAL_MINUTES", "60"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
