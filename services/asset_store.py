"""
Binary image storage for menu items.

Assets live under <root>/<bucket>/<path> and are served from
<public_base_url>/<bucket>/<path>, so the "/<bucket>/" segment of a public
URL is the marker used to recover the storage path.
"""
import asyncio
import time
import uuid
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional
from loguru import logger
from config.settings import settings
from utils.exceptions import StoreUnavailable, ValidationError

def build_asset_path(cafe_id: int, filename: str) -> str:
    extension = PurePosixPath(filename or "").suffix.lower()
    token = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
    return f"{cafe_id}/{token}{extension}"

def extract_asset_path(url: Optional[str], bucket: Optional[str] = None) -> Optional[str]:
    """
    Returns the storage path encoded in a public URL, or None when the URL
    does not contain the bucket marker or the path escapes the bucket
    (asset not managed by this store).
    """
    if not url:
        return None

    marker = f"/{bucket or settings.ASSET_BUCKET}/"
    if marker not in url:
        return None

    path = url.split(marker, 1)[1].split("?", 1)[0]
    if not path:
        return None
    try:
        return _check_path(path)
    except ValidationError:
        logger.warning(f"Ignoring unsafe asset path in URL: {url}")
        return None

def _check_path(path: str) -> str:
    parts = PurePosixPath(path).parts
    if not parts or path.startswith("/") or ".." in parts:
        raise ValidationError(f"Invalid asset path: {path}", field="image")
    return path


class AssetStore:
    """Interface of the object store used by the image lifecycle functions."""

    bucket: str

    async def upload(self, path: str, content: bytes) -> Dict[str, str]:
        raise NotImplementedError

    def get_public_url(self, path: str) -> str:
        raise NotImplementedError

    async def remove(self, paths: List[str]) -> List[str]:
        raise NotImplementedError

    async def list_paths(self, prefix: str = "") -> List[str]:
        raise NotImplementedError

    async def exists(self, path: str) -> bool:
        raise NotImplementedError

    def path_from_url(self, url: Optional[str]) -> Optional[str]:
        return extract_asset_path(url, self.bucket)


class LocalAssetStore(AssetStore):
    def __init__(
        self,
        root: str | Path | None = None,
        public_base_url: Optional[str] = None,
        bucket: Optional[str] = None
    ):
        self.root = Path(root or settings.ASSET_STORAGE_ROOT)
        self.public_base_url = (public_base_url or settings.ASSET_PUBLIC_BASE_URL).rstrip("/")
        self.bucket = bucket or settings.ASSET_BUCKET

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def _file(self, path: str) -> Path:
        return self.bucket_dir / _check_path(path)

    async def upload(self, path: str, content: bytes) -> Dict[str, str]:
        target = self._file(path)

        def _write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Asset upload failed for {path}: {e}")
            raise StoreUnavailable(f"Could not upload image: {e}") from e

        logger.debug(f"Uploaded asset {path} ({len(content)} bytes)")
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{_check_path(path)}"

    async def remove(self, paths: List[str]) -> List[str]:
        files = [(path, self._file(path)) for path in paths]

        def _unlink():
            removed = []
            for path, target in files:
                if target.exists():
                    target.unlink()
                    removed.append(path)
            return removed

        try:
            removed = await asyncio.to_thread(_unlink)
        except OSError as e:
            logger.error(f"Asset removal failed for {paths}: {e}")
            raise StoreUnavailable(f"Could not delete image: {e}") from e

        logger.debug(f"Removed assets: {removed}")
        return removed

    async def list_paths(self, prefix: str = "") -> List[str]:
        base = self.bucket_dir

        def _scan():
            if not base.exists():
                return []
            return sorted(
                p.relative_to(base).as_posix()
                for p in base.rglob("*")
                if p.is_file()
            )

        try:
            paths = await asyncio.to_thread(_scan)
        except OSError as e:
            raise StoreUnavailable(f"Could not list images: {e}") from e

        return [p for p in paths if p.startswith(prefix)]

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._file(path).exists)
