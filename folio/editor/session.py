"""In-memory editing of one page document.

An :class:`EditingSession` holds the authoritative working copy of an owner's
draft. Every mutation is a synchronous copy-on-write of the document: the
touched section gets a new object, every other section keeps its identity.
Only :meth:`EditingSession.save_draft` and :meth:`EditingSession.publish`
talk to the store.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime, UTC
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from folio.document.models import (
    SECTION_CLASSES,
    Background,
    ColorBackground,
    DocumentModel,
    HeroSection,
    ImageBackground,
    KnownSection,
    Logo,
    PageConfig,
    PageMeta,
    SectionBase,
    SectionLayout,
    SectionType,
    SocialLink,
    UnknownSection,
    VideoSection,
)
from folio.document.templates import TemplateName, get_template
from folio.document.validation import assert_clean, clean_page_config
from folio.editor.stores import ConfigStore, Uploader, UploadFile
from folio.lib.exceptions import (
    EditorBusyError,
    FolioError,
    NotFoundError,
    UploadFailure,
    ValidationError,
)

logger = logging.getLogger(__name__)

BackgroundScope = Literal["page", "news", "blog", "blog_detail"]

_BACKGROUND_FIELDS: dict[str, str] = {
    "page": "background",
    "news": "news_background",
    "blog": "blog_background",
    "blog_detail": "blog_detail_background",
}


def _validated(build: Callable[[], Any]) -> Any:
    try:
        return build()
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid edit",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def _sync_video_enabled(section: KnownSection) -> KnownSection:
    # A video section is shown exactly when it has a URL to play
    if not isinstance(section, VideoSection):
        return section
    has_url = any(item.url.strip() for item in section.props.items)
    if section.enabled == has_url:
        return section
    return section.model_copy(update={"enabled": has_url})


class EditingSession:
    """Working copy of a page document plus its save/publish state.

    ``saving`` and ``publishing`` are mutually exclusive. Local edits stay
    allowed while either is in flight; they remain ``dirty`` and go out with
    the next save.
    """

    def __init__(
        self,
        store: ConfigStore,
        config: PageConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.config = config if config is not None else get_template("empty")
        self.dirty = False
        self.saving = False
        self.publishing = False
        self.last_saved_at: datetime | None = None
        self.last_error: Exception | None = None
        self._clock = clock

    @classmethod
    async def load(cls, store: ConfigStore, template: TemplateName = "empty") -> "EditingSession":
        """Start a session from the store's draft, or from ``template`` if there is none."""
        try:
            config = await store.get_draft()
        except NotFoundError:
            logger.info("No draft found, starting from the %s template", template)
            config = get_template(template)
        return cls(store, config)

    @property
    def busy(self) -> bool:
        return self.saving or self.publishing

    # -- internals --

    def _commit(self, config: PageConfig) -> None:
        self.config = config
        self.dirty = True

    def _find(self, section_id: str) -> tuple[int, KnownSection]:
        for index, section in enumerate(self.config.sections):
            if section.id == section_id:
                if isinstance(section, UnknownSection):
                    raise NotFoundError(f"Section {section_id!r} has an unsupported type and cannot be edited")
                return index, section
        raise NotFoundError(f"No section {section_id!r}")

    def _replace_section(
        self, section_id: str, change: Callable[[KnownSection], KnownSection]
    ) -> KnownSection:
        index, section = self._find(section_id)
        updated = change(section)
        sections = list(self.config.sections)
        sections[index] = updated
        self._commit(self.config.model_copy(update={"sections": sections}))
        return updated

    def _replace_items(
        self, section_id: str, change: Callable[[list], list]
    ) -> KnownSection:
        def apply(section: KnownSection) -> KnownSection:
            props = section.props.model_copy(update={section.items_field: change(section.items)})
            return _sync_video_enabled(section.model_copy(update={"props": props}))

        return self._replace_section(section_id, apply)

    def new_section_id(self, section_type: str) -> str:
        """A fresh ``{type}-{milliseconds}`` id not used by any section."""
        taken = {section.id for section in self.config.sections}
        stamp = int(self._clock() * 1000)
        while f"{section_type}-{stamp}" in taken:
            stamp += 1
        return f"{section_type}-{stamp}"

    # -- sections --

    def get_section(self, section_type: SectionType) -> KnownSection | None:
        """First section of ``section_type`` in document order."""
        for section in self.config.sections:
            if isinstance(section, SectionBase) and section.type == section_type:
                return section
        return None

    def ensure_section(self, section_type: SectionType) -> KnownSection:
        """Return the section of ``section_type``, creating it if needed.

        A new section is appended after every existing one; a new hero always
        gets order 0.
        """
        existing = self.get_section(section_type)
        if existing is not None:
            return existing

        try:
            section_class = SECTION_CLASSES[section_type]
        except KeyError:
            raise ValueError(f"Unknown section type: {section_type!r}") from None

        if section_class is HeroSection:
            order = 0
        else:
            order = max((section.order for section in self.config.sections), default=-1) + 1
        section = _sync_video_enabled(section_class(id=self.new_section_id(section_type), order=order))
        self._commit(self.config.model_copy(update={"sections": [*self.config.sections, section]}))
        return section

    def update_section_props(self, section_id: str, patch: dict[str, Any]) -> KnownSection:
        """Shallow-merge ``patch`` into a section's props.

        Replacing a video section's item list re-derives its ``enabled`` flag.
        """

        def apply(section: KnownSection) -> KnownSection:
            updated = section.model_copy(update={"props": _validated(lambda: section.props.merged(patch))})
            return _sync_video_enabled(updated) if section.items_field in patch else updated

        return self._replace_section(section_id, apply)

    def toggle_enabled(self, section_id: str) -> KnownSection:
        return self._replace_section(
            section_id, lambda section: section.model_copy(update={"enabled": not section.enabled})
        )

    def set_order(self, section_id: str, order: int) -> KnownSection:
        if order < 0:
            raise ValidationError(f"Order must not be negative, got {order}")
        return self._replace_section(section_id, lambda section: section.model_copy(update={"order": order}))

    def set_col_span(self, section_id: str, col_span: int) -> KnownSection:
        layout = _validated(lambda: SectionLayout(col_span=col_span))
        return self._replace_section(section_id, lambda section: section.model_copy(update={"layout": layout}))

    def delete_section(self, section_id: str) -> None:
        index, _ = self._find(section_id)
        sections = list(self.config.sections)
        del sections[index]
        self._commit(self.config.model_copy(update={"sections": sections}))

    # -- items --

    def add_item(self, section_id: str, values: dict[str, Any] | None = None) -> DocumentModel:
        """Append a new item to a section's item list and return it."""
        _, section = self._find(section_id)
        item = _validated(lambda: section.item_model.model_validate(values or {}))
        self._replace_items(section_id, lambda items: [*items, item])
        return item

    def update_item(self, section_id: str, item_id: str, patch: dict[str, Any]) -> DocumentModel:
        _, section = self._find(section_id)
        for item in section.items:
            if item.id == item_id:
                updated = _validated(lambda: item.merged(patch))
                break
        else:
            raise NotFoundError(f"No item {item_id!r} in section {section_id!r}")
        self._replace_items(
            section_id, lambda items: [updated if entry.id == item_id else entry for entry in items]
        )
        return updated

    def delete_item(self, section_id: str, item_id: str) -> None:
        _, section = self._find(section_id)
        if not any(item.id == item_id for item in section.items):
            raise NotFoundError(f"No item {item_id!r} in section {section_id!r}")
        self._replace_items(section_id, lambda items: [entry for entry in items if entry.id != item_id])

    def move_item(self, section_id: str, item_id: str, offset: int) -> None:
        """Move an item ``offset`` places within its list, clamped to the ends."""
        _, section = self._find(section_id)
        items = section.items
        positions = [index for index, item in enumerate(items) if item.id == item_id]
        if not positions:
            raise NotFoundError(f"No item {item_id!r} in section {section_id!r}")
        current = positions[0]
        target = min(max(current + offset, 0), len(items) - 1)
        if target == current:
            return
        item = items.pop(current)
        items.insert(target, item)
        self._replace_items(section_id, lambda _: items)

    # -- page-level fields --

    def set_background(self, background: dict[str, Any] | Background, scope: BackgroundScope = "page") -> None:
        try:
            field_name = _BACKGROUND_FIELDS[scope]
        except KeyError:
            raise ValueError(f"Unknown background scope: {scope!r}") from None
        if isinstance(background, dict):
            kind = background.get("type")
            model = ImageBackground if kind == "image" else ColorBackground
            background = _validated(lambda: model.model_validate(background))
        self._commit(self.config.model_copy(update={field_name: background}))

    def set_logo(self, patch: dict[str, Any] | None) -> Logo | None:
        """Merge ``patch`` into the logo; ``None`` removes it."""
        if patch is None:
            logo = None
        elif self.config.logo is None:
            logo = _validated(lambda: Logo.model_validate(patch))
        else:
            logo = _validated(lambda: self.config.logo.merged(patch))
        self._commit(self.config.model_copy(update={"logo": logo}))
        return logo

    def _toggle(self, field_name: str) -> bool:
        value = getattr(self.config, field_name) is False
        self._commit(self.config.model_copy(update={field_name: value}))
        return value

    def toggle_logo(self) -> bool:
        return self._toggle("show_logo")

    def toggle_social_links(self) -> bool:
        return self._toggle("show_social_links")

    def toggle_hero_thumb_strip(self) -> bool:
        return self._toggle("show_hero_thumb_strip")

    def add_social_link(self, name: str, url: str, icon: str | None = None) -> SocialLink:
        link = SocialLink(name=name, url=url, icon=icon)
        links = [*(self.config.social_links or []), link]
        self._commit(self.config.model_copy(update={"social_links": links}))
        return link

    def update_social_link(self, link_id: str, patch: dict[str, Any]) -> SocialLink:
        links = list(self.config.social_links or [])
        for index, link in enumerate(links):
            if link.id == link_id:
                links[index] = _validated(lambda: link.merged(patch))
                self._commit(self.config.model_copy(update={"social_links": links}))
                return links[index]
        raise NotFoundError(f"No social link {link_id!r}")

    def delete_social_link(self, link_id: str) -> None:
        links = self.config.social_links or []
        if not any(link.id == link_id for link in links):
            raise NotFoundError(f"No social link {link_id!r}")
        self._commit(
            self.config.model_copy(update={"social_links": [link for link in links if link.id != link_id]})
        )

    def set_meta(self, title: str | None = None, description: str | None = None) -> PageMeta:
        meta = PageMeta(title=title, description=description)
        self._commit(self.config.model_copy(update={"meta": meta}))
        return meta

    # -- uploads --

    async def _upload(self, uploader: Uploader, file: UploadFile) -> str:
        try:
            result = await uploader.upload(file)
        except UploadFailure:
            raise
        except (FolioError, OSError) as exc:
            raise UploadFailure(f"Upload of {file.filename} failed: {exc}") from exc
        src = result.get("src") if isinstance(result, dict) else None
        if not src:
            raise UploadFailure(f"Upload of {file.filename} returned no URL")
        return src

    async def attach_upload(
        self,
        uploader: Uploader,
        file: UploadFile,
        section_id: str,
        item_id: str | None = None,
        field: str | None = None,
    ) -> str:
        """Upload ``file`` and store its URL on an item.

        With no ``item_id`` a new item is appended. ``field`` defaults to the
        section type's upload field (``url`` for videos, ``src`` for images).
        The document is left untouched when the upload fails.
        """
        _, section = self._find(section_id)
        if item_id is not None and not any(item.id == item_id for item in section.items):
            raise NotFoundError(f"No item {item_id!r} in section {section_id!r}")
        field = field or section.upload_field
        src = await self._upload(uploader, file)
        if item_id is None:
            self.add_item(section_id, {field: src})
        else:
            self.update_item(section_id, item_id, {field: src})
        return src

    async def upload_background(
        self, uploader: Uploader, file: UploadFile, scope: BackgroundScope = "page"
    ) -> str:
        src = await self._upload(uploader, file)
        self.set_background(ImageBackground(value=src), scope)
        return src

    async def upload_logo(self, uploader: Uploader, file: UploadFile) -> str:
        src = await self._upload(uploader, file)
        self.set_logo({"src": src})
        return src

    # -- persistence --

    async def _save(self, snapshot: PageConfig, outgoing: PageConfig) -> None:
        cleaned = clean_page_config(outgoing)
        assert_clean(cleaned)
        try:
            await self.store.set_draft(cleaned)
        except Exception as exc:
            self.last_error = exc
            logger.warning("Saving draft failed: %s", exc)
            raise
        self.last_saved_at = datetime.now(UTC)
        self.last_error = None
        # Edits made during the round trip stay dirty for the next save
        if self.config is snapshot:
            self.config = cleaned
            self.dirty = False

    async def save_draft(self) -> None:
        """Clean up the working copy and write it as the owner's draft.

        Raises:
            EditorBusyError: a save or publish is already in flight
        """
        if self.busy:
            raise EditorBusyError("A save or publish is already in progress")
        self.saving = True
        try:
            snapshot = self.config
            await self._save(snapshot, snapshot)
        finally:
            self.saving = False

    async def publish(self) -> None:
        """Save the working copy as the draft, then publish it."""
        if self.busy:
            raise EditorBusyError("A save or publish is already in progress")
        self.publishing = True
        try:
            snapshot = self.config
            outgoing = snapshot if snapshot.has_published else snapshot.model_copy(update={"has_published": True})
            await self._save(snapshot, outgoing)
            try:
                await self.store.publish()
            except Exception as exc:
                # The draft is saved but the public page is stale
                self.dirty = True
                self.last_error = exc
                logger.warning("Publishing failed: %s", exc)
                raise
        finally:
            self.publishing = False
