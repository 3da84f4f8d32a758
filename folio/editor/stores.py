"""Backends the editing session loads from, saves to and uploads through."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.config import StorageConfig
from folio.db.services import page_config_service
from folio.document.models import PageConfig
from folio.document.templates import TemplateName
from folio.lib.exceptions import (
    FolioError,
    NoDraftError,
    NotFoundError,
    TransientIOError,
    UploadFailure,
    UploadTooLargeError,
    ValidationError,
)
from folio.lib.storage import StorageBackend, upload_asset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadFile:
    """A file picked for upload by the editor."""

    filename: str
    data: bytes
    content_type: str


class ConfigStore(Protocol):
    """Draft and publish operations for one owner's page."""

    async def get_draft(self) -> PageConfig:
        ...

    async def set_draft(self, config: PageConfig) -> None:
        ...

    async def publish(self) -> None:
        ...


class Uploader(Protocol):
    async def upload(self, file: UploadFile) -> dict[str, str]:
        ...


class ServiceConfigStore:
    """Store backed directly by the page config service.

    Each call opens its own database session. The page record is ensured on
    load, the same way the HTTP API does it.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        owner_id: str,
        slug: str,
        template: TemplateName = "empty",
    ) -> None:
        self.session_maker = session_maker
        self.owner_id = owner_id
        self.slug = slug
        self.template = template

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_maker() as db_session:
                yield db_session
        except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError) as exc:
            raise TransientIOError(f"Database unavailable: {exc}") from exc

    async def get_draft(self) -> PageConfig:
        async with self._session() as db_session:
            slots = await page_config_service.ensure_page(
                db_session, self.owner_id, self.slug, self.template
            )
        return slots.draft

    async def set_draft(self, config: PageConfig) -> None:
        async with self._session() as db_session:
            await page_config_service.set_draft(db_session, self.owner_id, config)

    async def publish(self) -> None:
        async with self._session() as db_session:
            await page_config_service.publish(db_session, self.owner_id)


class StorageUploader:
    """Uploads straight into a storage backend, scoped to one owner."""

    def __init__(self, backend: StorageBackend, config: StorageConfig, owner_id: str) -> None:
        self.backend = backend
        self.config = config
        self.owner_id = owner_id

    async def upload(self, file: UploadFile) -> dict[str, str]:
        return await upload_asset(
            self.backend,
            self.config,
            self.owner_id,
            file.filename,
            file.data,
            file.content_type,
        )


class HttpConfigStore:
    """Store that talks to the page API over HTTP.

    The client carries the owner's identity (session cookie) and the base URL.
    Transport failures and server errors become :class:`TransientIOError`;
    client errors map onto the matching folio error.
    """

    def __init__(self, client: httpx.AsyncClient, base_path: str = "/api/page/me") -> None:
        self.client = client
        self.base_path = base_path.rstrip("/")

    async def _request(self, method: str, path: str = "", **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, f"{self.base_path}{path}", **kwargs)
        except httpx.TransportError as exc:
            raise TransientIOError(f"{method} {self.base_path}{path} failed: {exc}") from exc
        _raise_for_status(response)
        return response.json()

    async def get_draft(self) -> PageConfig:
        body = await self._request("GET")
        return PageConfig.from_document(body["draftConfig"])

    async def set_draft(self, config: PageConfig) -> None:
        await self._request("PUT", json={"draftConfig": config.to_document()})

    async def publish(self) -> None:
        await self._request("POST", "/publish")

    async def upload(self, file: UploadFile) -> dict[str, str]:
        try:
            body = await self._request(
                "POST",
                "/upload",
                files={"file": (file.filename, file.data, file.content_type)},
            )
        except TransientIOError as exc:
            raise UploadFailure(str(exc)) from exc
        return {"src": body["src"]}


def _error_detail(response: httpx.Response) -> tuple[str, list]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, []
    if not isinstance(body, dict):
        return str(body), []
    return str(body.get("detail") or body.get("error") or response.reason_phrase), body.get("details") or []


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    detail, details = _error_detail(response)
    status = response.status_code
    logger.debug("Page API returned %s: %s", status, detail)
    if status == 404:
        raise NotFoundError(detail)
    if status == 409:
        raise NoDraftError(detail)
    if status == 413:
        raise UploadTooLargeError(detail)
    if status == 400:
        raise ValidationError(detail, details=details)
    if status >= 500:
        raise TransientIOError(f"Server error {status}: {detail}")
    error = FolioError(detail)
    error.status_code = status
    raise error
