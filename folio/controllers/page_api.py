"""JSON API for reading, saving, publishing and uploading page documents."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from litestar import Controller, Request, get, post, put
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.params import Body
from litestar.status_codes import HTTP_200_OK
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import Settings
from folio.controllers.helpers import get_owner
from folio.db.services import page_config_service
from folio.document.models import PageConfig
from folio.document.validation import check_submission
from folio.lib.exceptions import NotFoundError, ValidationError
from folio.lib.storage import StorageBackend, upload_asset

logger = logging.getLogger(__name__)


def _parse_draft(data: dict[str, Any]) -> PageConfig:
    document = data.get("draftConfig") if isinstance(data, dict) else None
    if not isinstance(document, dict):
        raise ValidationError("draftConfig is required")
    try:
        return PageConfig.from_document(document)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid config",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


class PageApiController(Controller):
    """Owner endpoints under ``/api/page/me`` plus the public read endpoint."""

    path = "/api/page"

    @get("/me")
    async def get_my_draft(self, request: Request, db_session: AsyncSession) -> dict[str, Any]:
        """Return the owner's draft, creating the page on first access."""
        owner = get_owner(request)
        settings: Settings = request.app.state.settings
        slots = await page_config_service.ensure_page(
            db_session, owner.id, owner.slug, settings.pages.seed_template
        )
        return {"slug": slots.slug, "draftConfig": slots.draft.to_document()}

    @put("/me")
    async def save_my_draft(
        self, request: Request, db_session: AsyncSession, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Overwrite the owner's draft after checking it against the document limits."""
        owner = get_owner(request)
        settings: Settings = request.app.state.settings
        config = _parse_draft(data)

        issues = check_submission(config, settings.pages)
        if issues:
            raise ValidationError("Invalid config", details=issues)

        await page_config_service.ensure_page(
            db_session, owner.id, owner.slug, settings.pages.seed_template
        )
        await page_config_service.set_draft(db_session, owner.id, config)
        return {"ok": True, "pageConfig": config.to_document()}

    @post("/me/publish", status_code=HTTP_200_OK)
    async def publish_my_page(self, request: Request, db_session: AsyncSession) -> dict[str, Any]:
        """Copy the owner's draft to the published slot."""
        owner = get_owner(request)
        settings: Settings = request.app.state.settings
        await page_config_service.ensure_page(
            db_session, owner.id, owner.slug, settings.pages.seed_template
        )
        published_at = await page_config_service.publish(db_session, owner.id)
        return {"ok": True, "slug": owner.slug, "publishedAt": published_at.isoformat()}

    @post("/me/upload", status_code=HTTP_200_OK)
    async def upload(
        self,
        request: Request,
        data: Annotated[UploadFile, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> dict[str, Any]:
        """Store an image for the owner's page and return its URL."""
        owner = get_owner(request)
        settings: Settings = request.app.state.settings
        storage: StorageBackend = request.app.state.storage

        content = await data.read()
        result = await upload_asset(
            storage,
            settings.storage,
            owner.id,
            filename=data.filename or "untitled",
            data=content,
            content_type=data.content_type or "application/octet-stream",
        )
        logger.info("Owner %s uploaded %s", owner.id, result["src"])
        return {"ok": True, **result}

    @get("/{slug:str}")
    async def get_published_page(self, slug: str, db_session: AsyncSession) -> dict[str, Any]:
        """Return a published page. No identity needed."""
        config = await page_config_service.get_published(db_session, slug)
        if config is None:
            raise NotFoundError(f"Page '{slug}' not found")
        return {"slug": slug, "config": config.to_document()}
