"""Tests for local asset storage."""

from unittest.mock import AsyncMock

import pytest

from folio.config import StorageConfig
from folio.editor import StorageUploader, UploadFile
from folio.lib.exceptions import UploadFailure, UploadTooLargeError
from folio.lib.storage import LocalStorageBackend, build_asset_key, upload_asset

PNG = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def backend(tmp_path):
    return LocalStorageBackend(tmp_path / "uploads", "/uploads/")


class TestLocalStorageBackend:
    @pytest.mark.asyncio
    async def test_put_get_delete(self, backend):
        stored = await backend.put("owner/a.png", PNG, "image/png")

        assert stored.url == "/uploads/owner/a.png"
        assert stored.size == len(PNG)
        assert await backend.exists("owner/a.png")
        assert await backend.get("owner/a.png") == PNG

        await backend.delete("owner/a.png")

        assert not await backend.exists("owner/a.png")

    @pytest.mark.asyncio
    async def test_keys_cannot_escape_base_path(self, backend):
        with pytest.raises(UploadFailure):
            await backend.put("../outside.png", PNG, "image/png")


def test_asset_key_is_content_addressed():
    first = build_asset_key("owner", "Photo.PNG", PNG, "image/png")

    assert first.startswith("owner/")
    assert first.endswith(".png")
    assert first == build_asset_key("owner", "other.png", PNG, "image/png")
    assert build_asset_key("owner", "noext", PNG, "image/png").endswith(".png")


class TestUploadAsset:
    @pytest.mark.asyncio
    async def test_stores_and_returns_url(self, backend):
        result = await upload_asset(backend, StorageConfig(), "owner-1", "a.png", PNG, "image/png")

        assert result["src"].startswith("/uploads/owner-1/")

    @pytest.mark.asyncio
    async def test_too_large(self, backend):
        with pytest.raises(UploadTooLargeError):
            await upload_asset(backend, StorageConfig(max_upload_size=4), "owner-1", "a.png", PNG, "image/png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data, content_type", [(b"", "image/png"), (PNG, "text/html")])
    async def test_rejected(self, backend, data, content_type):
        with pytest.raises(UploadFailure):
            await upload_asset(backend, StorageConfig(), "owner-1", "a.png", data, content_type)

    @pytest.mark.asyncio
    async def test_backend_errors(self):
        backend = AsyncMock()
        backend.put.side_effect = OSError("read-only file system")

        with pytest.raises(UploadFailure):
            await upload_asset(backend, StorageConfig(), "owner-1", "a.png", PNG, "image/png")


@pytest.mark.asyncio
async def test_storage_uploader(backend):
    uploader = StorageUploader(backend, StorageConfig(), "owner-1")

    result = await uploader.upload(UploadFile("a.png", PNG, "image/png"))

    assert await backend.exists(result["src"].removeprefix("/uploads/"))
