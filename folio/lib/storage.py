"""Storage for uploaded page assets.

Uploads land on the local filesystem under a content-addressed key and are
served from ``url_prefix``. The page engine only keeps the returned ``src``
URL; it never checks that the URL stays reachable.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import mimetypes
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from folio.config import StorageConfig
from folio.lib.exceptions import UploadFailure, UploadTooLargeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    key: str
    url: str
    content_type: str
    size: int
    content_hash: str


@runtime_checkable
class StorageBackend(Protocol):
    async def put(self, key: str, data: bytes, content_type: str) -> StoredFile:
        ...

    async def get(self, key: str) -> bytes:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def exists(self, key: str) -> bool:
        ...


def _write_atomically(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class LocalStorageBackend:
    """Files under ``root``; readers never see a partially written file."""

    def __init__(self, root: Path, url_prefix: str = "/uploads") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def path_for(self, key: str) -> Path:
        """Filesystem path of ``key``, refusing keys that escape the root."""
        root = self.root.resolve()
        path = (root / key).resolve()
        if path == root or not path.is_relative_to(root):
            raise UploadFailure(f"Invalid storage key: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    async def put(self, key: str, data: bytes, content_type: str) -> StoredFile:
        await asyncio.to_thread(_write_atomically, self.path_for(key), data)
        return StoredFile(
            key=key,
            url=self.url_for(key),
            content_type=content_type,
            size=len(data),
            content_hash=hashlib.sha256(data).hexdigest(),
        )

    async def get(self, key: str) -> bytes:
        return await asyncio.to_thread(self.path_for(key).read_bytes)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self.path_for(key).is_file)


def build_asset_key(owner_id: str, filename: str, data: bytes, content_type: str) -> str:
    """Content-addressed key scoped to the owner: ``{owner}/{sha256}{ext}``.

    The extension comes from the filename, falling back to the content type.
    """
    extension = Path(filename).suffix.lower() or mimetypes.guess_extension(content_type) or ""
    return f"{owner_id}/{hashlib.sha256(data).hexdigest()}{extension}"


async def upload_asset(
    backend: StorageBackend,
    config: StorageConfig,
    owner_id: str,
    filename: str,
    data: bytes,
    content_type: str,
) -> dict[str, str]:
    """Store an uploaded page asset and return ``{"src": url}``.

    Raises:
        UploadTooLargeError: the file exceeds ``config.max_upload_size``
        UploadFailure: the file is empty, its type is not allowed, or the
            backend could not store it
    """
    if not data:
        raise UploadFailure("Uploaded file is empty")
    if len(data) > config.max_upload_size:
        raise UploadTooLargeError(f"{filename} is {len(data)} bytes, the limit is {config.max_upload_size}")
    if content_type not in config.allowed_content_types:
        raise UploadFailure(f"Unsupported file type: {content_type}")

    key = build_asset_key(owner_id, filename, data, content_type)
    try:
        stored = await backend.put(key, data, content_type)
    except OSError as exc:
        logger.warning("Failed to store upload %s", key, exc_info=True)
        raise UploadFailure(f"Could not store {filename}") from exc

    logger.debug("Stored %s (%d bytes) as %s", filename, stored.size, stored.key)
    return {"src": stored.url}
