import pytest
from services.asset_store import LocalAssetStore, build_asset_path, extract_asset_path
from utils.exceptions import ValidationError

PUBLIC_BASE = "http://cdn.test/storage/v1/object/public"

@pytest.fixture
def store(tmp_path):
    return LocalAssetStore(root=tmp_path, public_base_url=PUBLIC_BASE, bucket="menu-images")

class TestAssetPaths:
    def test_build_asset_path_scoped_by_cafe(self):
        path = build_asset_path(7, "Latte.JPG")
        assert path.startswith("7/")
        assert path.endswith(".jpg")
    
    def test_build_asset_path_is_unique(self):
        assert build_asset_path(7, "a.png") != build_asset_path(7, "a.png")
    
    def test_extract_asset_path(self):
        url = f"{PUBLIC_BASE}/menu-images/7/1700000000000-abcd1234.jpg"
        assert extract_asset_path(url, "menu-images") == "7/1700000000000-abcd1234.jpg"
    
    def test_extract_asset_path_strips_query(self):
        url = f"{PUBLIC_BASE}/menu-images/7/a.jpg?v=2"
        assert extract_asset_path(url, "menu-images") == "7/a.jpg"
    
    def test_extract_without_marker(self):
        assert extract_asset_path("https://example.com/images/a.jpg", "menu-images") is None
        assert extract_asset_path(None, "menu-images") is None
        assert extract_asset_path("", "menu-images") is None
    
    def test_extract_rejects_paths_leaving_the_bucket(self):
        assert extract_asset_path(f"{PUBLIC_BASE}/menu-images/../1/a.jpg", "menu-images") is None
        assert extract_asset_path(f"{PUBLIC_BASE}/menu-images//etc/passwd", "menu-images") is None

@pytest.mark.asyncio
async def test_upload_and_public_url(store, tmp_path):
    result = await store.upload("3/photo.png", b"png-bytes")
    
    assert result == {"path": "3/photo.png"}
    assert (tmp_path / "menu-images" / "3" / "photo.png").read_bytes() == b"png-bytes"
    url = store.get_public_url("3/photo.png")
    assert url == f"{PUBLIC_BASE}/menu-images/3/photo.png"
    assert store.path_from_url(url) == "3/photo.png"

@pytest.mark.asyncio
async def test_remove_ignores_missing(store):
    await store.upload("3/a.png", b"a")
    
    removed = await store.remove(["3/a.png", "3/missing.png"])
    
    assert removed == ["3/a.png"]
    assert not await store.exists("3/a.png")

@pytest.mark.asyncio
async def test_list_paths_by_prefix(store):
    await store.upload("1/a.png", b"a")
    await store.upload("1/b.png", b"b")
    await store.upload("2/c.png", b"c")
    
    assert await store.list_paths("1/") == ["1/a.png", "1/b.png"]
    assert len(await store.list_paths()) == 3

@pytest.mark.asyncio
async def test_list_paths_empty_store(store):
    assert await store.list_paths() == []

@pytest.mark.asyncio
async def test_rejects_path_traversal(store):
    with pytest.raises(ValidationError):
        await store.upload("../outside.png", b"x")
    with pytest.raises(ValidationError):
        store.get_public_url("/etc/passwd")

@pytest.mark.asyncio
async def test_health_probe_cleans_up(store):
    from utils.health_check import check_asset_store
    
    is_ok, message = await check_asset_store(store)
    
    assert is_ok
    assert "writable" in message
    assert await store.list_paths() == []
