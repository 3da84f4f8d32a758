"""Config store service: the draft and published slots of each page."""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from folio.db.models import Page
from folio.document.models import PageConfig
from folio.document.templates import TemplateName, empty_page, get_template
from folio.lib.exceptions import NoDraftError, NotFoundError
from folio.lib.hooks import (
    AFTER_DRAFT_SAVE,
    AFTER_PAGE_CREATE,
    AFTER_PUBLISH,
    BEFORE_DRAFT_SAVE,
    BEFORE_PUBLISH,
    hooks,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageSlots:
    """Both slots of a page as returned by :func:`ensure_page`."""

    slug: str
    draft: PageConfig
    published: PageConfig | None


def _to_slots(page: Page) -> PageSlots:
    draft = PageConfig.from_document(page.draft_config) if page.draft_config is not None else empty_page()
    published = (
        PageConfig.from_document(page.published_config) if page.published_config is not None else None
    )
    return PageSlots(slug=page.slug, draft=draft, published=published)


async def get_page(db_session: AsyncSession, owner_id: str) -> Page | None:
    """Get the page record owned by ``owner_id``, freshly loaded from the database."""
    result = await db_session.execute(
        select(Page).where(Page.owner_id == owner_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_page_by_slug(db_session: AsyncSession, slug: str) -> Page | None:
    result = await db_session.execute(
        select(Page).where(Page.slug == slug).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def ensure_page(
    db_session: AsyncSession,
    owner_id: str,
    slug: str,
    template: TemplateName = "empty",
) -> PageSlots:
    """Return the owner's page slots, creating them on first access.

    A new page gets the seed template in both slots, so the published page
    starts out equal to the initial draft. Existing slots are returned
    unchanged.

    Args:
        db_session: Database session
        owner_id: Identity of the page owner
        slug: Public identifier for the page
        template: Seed template for a new page ("empty" or "demo")

    Returns:
        The draft and published documents
    """
    page = await get_page(db_session, owner_id)
    if page is not None:
        return _to_slots(page)

    seed = get_template(template).to_document()
    page = Page(
        owner_id=owner_id,
        slug=slug,
        draft_config=seed,
        published_config=copy.deepcopy(seed),
        draft_saved_at=datetime.now(UTC),
    )
    db_session.add(page)
    try:
        await db_session.commit()
    except IntegrityError:
        # Lost a race with another first access for the same owner
        await db_session.rollback()
        page = await get_page(db_session, owner_id)
        if page is None:
            raise
        return _to_slots(page)

    await db_session.refresh(page)
    logger.info("Created page %r for owner %s from %s template", slug, owner_id, template)
    await hooks.do_action(AFTER_PAGE_CREATE, page)
    return _to_slots(page)


async def get_draft(db_session: AsyncSession, owner_id: str) -> PageConfig | None:
    """Get the owner's draft, or None when the owner has no page."""
    page = await get_page(db_session, owner_id)
    if page is None or page.draft_config is None:
        return None
    return PageConfig.from_document(page.draft_config)


async def get_published(db_session: AsyncSession, slug: str) -> PageConfig | None:
    """Get the published document by public slug. Needs no owner identity."""
    page = await get_page_by_slug(db_session, slug)
    if page is None or page.published_config is None:
        return None
    return PageConfig.from_document(page.published_config)


async def set_draft(db_session: AsyncSession, owner_id: str, config: PageConfig) -> datetime:
    """Overwrite the owner's draft with ``config``.

    Raises:
        NotFoundError: the owner has no page record

    Returns:
        The save timestamp
    """
    page = await get_page(db_session, owner_id)
    if page is None:
        raise NotFoundError(f"No page for owner {owner_id}")

    await hooks.do_action(BEFORE_DRAFT_SAVE, owner_id, config)

    saved_at = datetime.now(UTC)
    page.draft_config = config.to_document()
    page.draft_saved_at = saved_at
    await db_session.commit()

    await hooks.do_action(AFTER_DRAFT_SAVE, owner_id, config)
    return saved_at


async def publish(db_session: AsyncSession, owner_id: str) -> datetime:
    """Copy the owner's current draft over the published slot.

    The copy is a single UPDATE statement, so two concurrent publishes for the
    same owner cannot interleave a read of one draft with a write of another.

    Raises:
        NoDraftError: the owner has no page or the page has no draft

    Returns:
        The publish timestamp
    """
    await hooks.do_action(BEFORE_PUBLISH, owner_id)

    published_at = datetime.now(UTC)
    result = await db_session.execute(
        update(Page)
        .where(Page.owner_id == owner_id, Page.draft_config.is_not(None))
        .values(
            published_config=Page.draft_config,
            published_at=published_at,
            updated_at=published_at,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db_session.rollback()
        raise NoDraftError("No draft config found. Save a draft first.")
    await db_session.commit()

    logger.info("Published page for owner %s", owner_id)
    await hooks.do_action(AFTER_PUBLISH, owner_id)
    return published_at
