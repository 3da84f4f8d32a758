"""HTML pages: the public published page and the owner's draft preview."""

from litestar import Controller, Request, get
from litestar.response import Template as TemplateResponse
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import Settings
from folio.controllers.helpers import default_hero_slides, get_owner
from folio.db.services import page_config_service
from folio.document.models import PageConfig
from folio.lib.exceptions import NotFoundError
from folio.lib.hooks import COMPOSED_SECTIONS, hooks
from folio.rendering.composer import compose, page_context


async def render_page_response(request: Request, config: PageConfig, preview: bool = False) -> TemplateResponse:
    """Compose ``config`` and render it through ``page.html``.

    The composed section list passes through the ``composed_sections`` filter
    before rendering.
    """
    composed = compose(config, default_hero_slides(request))
    composed = await hooks.apply_filters(COMPOSED_SECTIONS, composed, config)
    return TemplateResponse("page.html", context=page_context(config, composed, preview=preview))


class PageWebController(Controller):
    path = "/"

    @get("/u/{slug:str}")
    async def view_page(self, request: Request, db_session: AsyncSession, slug: str) -> TemplateResponse:
        """Public page by slug."""
        config = await page_config_service.get_published(db_session, slug)
        if config is None:
            raise NotFoundError(f"Page '{slug}' not found")
        return await render_page_response(request, config)

    @get("/me/preview")
    async def preview(self, request: Request, db_session: AsyncSession) -> TemplateResponse:
        """Render the owner's current draft."""
        owner = get_owner(request)
        settings: Settings = request.app.state.settings
        slots = await page_config_service.ensure_page(
            db_session, owner.id, owner.slug, settings.pages.seed_template
        )
        return await render_page_response(request, slots.draft, preview=True)
