"""Page document model.

A page is a single JSON document: a background, an ordered list of
heterogeneous sections and a few optional page-level attachments (logo,
social links, meta). The wire format uses camelCase keys; attributes are
snake_case.

Every model is frozen. Edits produce new objects through ``model_copy`` so
untouched sections keep their identity.

Reading is lenient. Missing optional fields take their defaults, unknown keys
are kept as extras, and a section whose type is unknown or whose props do not
validate is loaded as an opaque :class:`UnknownSection` instead of failing the
whole document.
"""

import logging
import uuid
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

SectionType = Literal["hero", "links", "gallery", "news", "video"]
SECTION_TYPES: tuple[str, ...] = ("hero", "links", "gallery", "news", "video")

ColSpan = Literal[1, 2, 3, 4]
FULL_WIDTH: ColSpan = 4

Gap = Literal["sm", "md", "lg"]


def new_item_id(prefix: str) -> str:
    """Generate an id for an item inside a section's props."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class DocumentModel(BaseModel):
    """Base for every node of the page document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def merged(self, patch: dict[str, Any]):
        """Return a copy with ``patch`` shallow-merged and re-validated.

        Patch keys may be attribute names or their camelCase aliases.
        """
        data = self.model_dump(by_alias=True)
        fields = type(self).model_fields
        for key, value in patch.items():
            field = fields.get(key)
            data[field.alias if field is not None and field.alias else key] = value
        return type(self).model_validate(data)


# -- Page-level attachments --


class ColorBackground(DocumentModel):
    type: Literal["color"] = "color"
    value: str = "#000000"


class ImageBackground(DocumentModel):
    type: Literal["image"] = "image"
    value: str


Background = Annotated[Union[ColorBackground, ImageBackground], Field(discriminator="type")]


class Logo(DocumentModel):
    src: str | None = None
    alt: str | None = None
    opacity: float | None = None


class SocialLink(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("social"))
    name: str = ""
    url: str = ""
    icon: str | None = None
    enabled: bool = True


class PageMeta(DocumentModel):
    title: str | None = None
    description: str | None = None


# -- Section items and props --


class HeroSlide(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("slide"))
    src: str = ""
    alt: str | None = None
    href: str | None = None
    object_position: str | None = None


class HeroLayout(DocumentModel):
    height_vh: float | None = None
    background_color: str | None = None
    background_opacity: float | None = None


class CarouselConfig(DocumentModel):
    autoplay_interval: float | None = None
    transition_duration: float | None = None


class HeroProps(DocumentModel):
    slides: list[HeroSlide] = []
    title: str | None = None
    subtitle: str | None = None
    layout: HeroLayout | None = None
    carousel: CarouselConfig | None = None


class LinkItem(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("link"))
    label: str = ""
    href: str = ""
    icon: str | None = None


class LinksProps(DocumentModel):
    items: list[LinkItem] = []
    layout: Literal["grid", "list"] | None = None


class GalleryItem(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("image"))
    src: str = ""
    alt: str | None = None
    caption: str | None = None
    href: str | None = None


class GalleryProps(DocumentModel):
    items: list[GalleryItem] = []
    columns: Literal[2, 3, 4] | None = None
    gap: Gap | None = None


class NewsItem(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("news"))
    src: str = ""
    alt: str | None = None
    href: str = ""
    object_position: str | None = None


class BlockLayout(DocumentModel):
    padding_y: int | None = None
    background_color: str | None = None
    background_opacity: float | None = None
    max_width: str | None = None


class NewsProps(DocumentModel):
    items: list[NewsItem] = []
    layout: BlockLayout | None = None


class VideoItem(DocumentModel):
    id: str = Field(default_factory=lambda: new_item_id("video-item"))
    url: str = ""
    platform: Literal["auto", "youtube", "bilibili"] | None = None
    title: str | None = None
    thumbnail: str | None = None
    autoplay: bool | None = None
    muted: bool | None = None
    loop: bool | None = None
    controls: bool | None = None
    start_time: float | None = None


class VideoLayout(BlockLayout):
    aspect_ratio: Literal["16:9", "4:3", "1:1", "auto"] | None = None


class VideoDisplay(DocumentModel):
    columns: Literal[1, 2, 3] | None = None
    gap: Gap | None = None


class VideoProps(DocumentModel):
    items: list[VideoItem] = []
    layout: VideoLayout | None = None
    display: VideoDisplay | None = None


# -- Sections --


class SectionLayout(DocumentModel):
    """Presentation hints shared by every section type."""

    col_span: ColSpan | None = None


class SectionBase(DocumentModel):
    # Name of the list inside props that holds this section's items
    items_field: ClassVar[str] = "items"
    item_model: ClassVar[type[DocumentModel]]
    props_model: ClassVar[type[DocumentModel]]
    # Item field that receives an uploaded file URL
    upload_field: ClassVar[str] = "src"

    id: str
    enabled: bool = True
    order: int = 0
    layout: SectionLayout | None = None

    @property
    def col_span(self) -> int:
        if self.layout is None or self.layout.col_span is None:
            return FULL_WIDTH
        return self.layout.col_span

    @property
    def items(self) -> list:
        return list(getattr(self.props, self.items_field))


class HeroSection(SectionBase):
    items_field: ClassVar[str] = "slides"
    item_model: ClassVar[type[DocumentModel]] = HeroSlide
    props_model: ClassVar[type[DocumentModel]] = HeroProps

    type: Literal["hero"] = "hero"
    props: HeroProps = Field(default_factory=HeroProps)


class LinksSection(SectionBase):
    upload_field: ClassVar[str] = "icon"
    item_model: ClassVar[type[DocumentModel]] = LinkItem
    props_model: ClassVar[type[DocumentModel]] = LinksProps

    type: Literal["links"] = "links"
    props: LinksProps = Field(default_factory=LinksProps)


class GallerySection(SectionBase):
    item_model: ClassVar[type[DocumentModel]] = GalleryItem
    props_model: ClassVar[type[DocumentModel]] = GalleryProps

    type: Literal["gallery"] = "gallery"
    props: GalleryProps = Field(default_factory=GalleryProps)


class NewsSection(SectionBase):
    item_model: ClassVar[type[DocumentModel]] = NewsItem
    props_model: ClassVar[type[DocumentModel]] = NewsProps

    type: Literal["news"] = "news"
    props: NewsProps = Field(default_factory=NewsProps)


class VideoSection(SectionBase):
    upload_field: ClassVar[str] = "url"
    item_model: ClassVar[type[DocumentModel]] = VideoItem
    props_model: ClassVar[type[DocumentModel]] = VideoProps

    type: Literal["video"] = "video"
    props: VideoProps = Field(default_factory=VideoProps)


class UnknownSection(BaseModel):
    """A section this version cannot interpret.

    The raw payload is kept verbatim so saving the document does not lose it.
    """

    model_config = ConfigDict(frozen=True)

    raw: dict[str, Any]

    @model_validator(mode="before")
    @classmethod
    def _wrap_raw(cls, data: Any) -> Any:
        if isinstance(data, dict) and set(data) != {"raw"}:
            return {"raw": data}
        return data

    @model_serializer
    def _dump_raw(self) -> dict[str, Any]:
        return self.raw

    @property
    def id(self) -> str:
        return str(self.raw.get("id", ""))

    @property
    def type(self) -> str:
        return str(self.raw.get("type", ""))

    @property
    def enabled(self) -> bool:
        return self.raw.get("enabled") is True

    @property
    def order(self) -> int:
        order = self.raw.get("order")
        return order if isinstance(order, int) else 0


KnownSection = Union[HeroSection, LinksSection, GallerySection, NewsSection, VideoSection]

SECTION_CLASSES: dict[str, type[SectionBase]] = {
    "hero": HeroSection,
    "links": LinksSection,
    "gallery": GallerySection,
    "news": NewsSection,
    "video": VideoSection,
}


def _section_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
        return kind if kind in SECTION_TYPES else "unknown"
    if isinstance(value, SectionBase):
        return value.type
    return "unknown"


Section = Annotated[
    Union[
        Annotated[HeroSection, Tag("hero")],
        Annotated[LinksSection, Tag("links")],
        Annotated[GallerySection, Tag("gallery")],
        Annotated[NewsSection, Tag("news")],
        Annotated[VideoSection, Tag("video")],
        Annotated[UnknownSection, Tag("unknown")],
    ],
    Discriminator(_section_tag),
]

_known_section_adapter: TypeAdapter[KnownSection] = TypeAdapter(
    Annotated[KnownSection, Field(discriminator="type")]
)


# -- Root document --


class PageConfig(DocumentModel):
    """The root page document stored in the draft and published slots."""

    background: Background = Field(default_factory=ColorBackground)
    # Background overrides for sub-pages
    news_background: Background | None = None
    blog_background: Background | None = None
    blog_detail_background: Background | None = None

    # Stored order is not render order, see folio.rendering.composer
    sections: list[Section] = []

    logo: Logo | None = None
    social_links: list[SocialLink] | None = None
    show_hero_thumb_strip: bool | None = None
    show_logo: bool | None = None
    show_social_links: bool | None = None
    meta: PageMeta | None = None
    has_published: bool | None = None

    @field_validator("sections", mode="before")
    @classmethod
    def _quarantine_malformed_sections(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value

        sections = []
        for raw in value:
            if not isinstance(raw, dict):
                if isinstance(raw, (SectionBase, UnknownSection)):
                    sections.append(raw)
                else:
                    logger.warning("Dropping non-object section entry %r", raw)
                continue
            if raw.get("type") not in SECTION_TYPES:
                sections.append(UnknownSection(raw=raw))
                continue
            try:
                sections.append(_known_section_adapter.validate_python(raw))
            except PydanticValidationError:
                logger.warning(
                    "Section %r (%s) is malformed; keeping it as opaque data",
                    raw.get("id"),
                    raw.get("type"),
                )
                sections.append(UnknownSection(raw=raw))
        return sections

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "PageConfig":
        """Build a page from its stored JSON document."""
        return cls.model_validate(data)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored JSON document (camelCase, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def section_by_id(self, section_id: str) -> SectionBase | UnknownSection | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None
