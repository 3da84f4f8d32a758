"""Pre-save cleanup and submission checks for page documents."""

import re
from typing import Any
from urllib.parse import urlparse

from folio.config import PagesConfig
from folio.document.models import (
    ColorBackground,
    GallerySection,
    HeroSection,
    NewsSection,
    PageConfig,
    SectionBase,
    UnknownSection,
)
from folio.lib.exceptions import ValidationError

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

SAFE_URL_SCHEMES = ("http", "https", "mailto")

# Browsers ignore ASCII control characters and whitespace inside a scheme
_URL_IGNORED_CHARS = re.compile(r"[\x00-\x20\x7f]")

# Item attributes that must be non-blank for an item to be kept on save
REQUIRED_ITEM_FIELDS: dict[str, tuple[str, ...]] = {
    "hero": ("src",),
    "gallery": ("src",),
    "news": ("src", "href"),
}

# (attribute path, min, max) bounds checked on submitted drafts
_HERO_BOUNDS = (
    (("layout", "height_vh"), 50, 300),
    (("layout", "background_opacity"), 0, 1),
    (("carousel", "autoplay_interval"), 1, 30),
    (("carousel", "transition_duration"), 0.1, 10),
)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_safe_url(url: str | None) -> bool:
    """Whether a link target is relative or uses one of ``SAFE_URL_SCHEMES``."""
    if _is_blank(url):
        return False
    try:
        parsed = urlparse(_URL_IGNORED_CHARS.sub("", url))
    except ValueError:
        return False
    if not parsed.scheme:
        return True
    if parsed.scheme not in SAFE_URL_SCHEMES:
        return False
    return parsed.scheme == "mailto" or bool(parsed.netloc)


def is_valid_item(section_type: str, item: Any) -> bool:
    """Whether an item carries every field its section type requires."""
    required = REQUIRED_ITEM_FIELDS.get(section_type, ())
    return not any(_is_blank(getattr(item, name, None)) for name in required)


def _clean_section(section: SectionBase) -> SectionBase:
    if section.type not in REQUIRED_ITEM_FIELDS:
        return section
    items = section.items
    kept = [item for item in items if is_valid_item(section.type, item)]
    if len(kept) == len(items):
        return section
    props = section.props.model_copy(update={section.items_field: kept})
    return section.model_copy(update={"props": props})


def clean_page_config(config: PageConfig) -> PageConfig:
    """Strip items that are missing required fields.

    Empty hero slides, gallery images without ``src`` and news items without
    ``src`` or ``href`` are allowed while editing but never persisted.
    Sections that need no change keep their identity. Applying this twice
    gives the same result as applying it once.
    """
    sections = [
        section if isinstance(section, UnknownSection) else _clean_section(section)
        for section in config.sections
    ]
    update: dict[str, Any] = {}
    if any(new is not old for new, old in zip(sections, config.sections)):
        update["sections"] = sections
    if config.news_background is None:
        update["news_background"] = ColorBackground()
    if not update:
        return config
    return config.model_copy(update=update)


def assert_clean(config: PageConfig) -> None:
    """Raise if any item still lacks required fields after cleanup."""
    invalid = [
        {"section": section.id, "item": getattr(item, "id", None)}
        for section in config.sections
        if isinstance(section, SectionBase)
        for item in section.items
        if not is_valid_item(section.type, item)
    ]
    if invalid:
        raise ValidationError("Document contains incomplete items", details=invalid)


def _lookup(obj: Any, path: tuple[str, ...]) -> Any:
    for name in path:
        obj = getattr(obj, name, None)
        if obj is None:
            return None
    return obj


def check_submission(config: PageConfig, limits: PagesConfig) -> list[dict[str, str]]:
    """Check a submitted draft against document limits.

    Returns a list of ``{"path", "message"}`` issues; empty when valid.
    """
    issues: list[dict[str, str]] = []

    def issue(path: str, message: str) -> None:
        issues.append({"path": path, "message": message})

    for name in ("background", "news_background", "blog_background", "blog_detail_background"):
        background = getattr(config, name)
        if background is None:
            continue
        if background.type == "color" and not HEX_COLOR_PATTERN.match(background.value):
            issue(name, f"Color must be #rrggbb, got {background.value!r}")
        if background.type == "image" and _is_blank(background.value):
            issue(name, "Image background needs a URL")

    if len(config.sections) > limits.max_sections:
        issue("sections", f"At most {limits.max_sections} sections allowed")

    seen: set[str] = set()
    for index, section in enumerate(config.sections):
        path = f"sections[{index}]"
        if not section.id:
            issue(path, "Section id is required")
        elif section.id in seen:
            issue(path, f"Duplicate section id {section.id!r}")
        seen.add(section.id)
        if section.order < 0:
            issue(f"{path}.order", "Order must not be negative")
        if isinstance(section, HeroSection):
            if len(section.props.slides) > limits.max_hero_slides:
                issue(f"{path}.props.slides", f"At most {limits.max_hero_slides} slides allowed")
            for attr_path, low, high in _HERO_BOUNDS:
                value = _lookup(section.props, attr_path)
                if value is not None and not low <= value <= high:
                    issue(f"{path}.props.{'.'.join(attr_path)}", f"Must be between {low} and {high}")
        if isinstance(section, (NewsSection, GallerySection)):
            for item in section.items:
                if not is_valid_item(section.type, item):
                    issue(f"{path}.props.items", f"Item {item.id!r} is incomplete")
        if isinstance(section, SectionBase):
            for item in section.items:
                href = getattr(item, "href", None)
                if not _is_blank(href) and not is_safe_url(href):
                    issue(f"{path}.props.{section.items_field}", f"Item {item.id!r} has an unsupported link {href!r}")

    if config.logo is not None and config.logo.opacity is not None:
        if not 0 <= config.logo.opacity <= 1:
            issue("logo.opacity", "Must be between 0 and 1")

    social_links = config.social_links or []
    if len(social_links) > limits.max_social_links:
        issue("social_links", f"At most {limits.max_social_links} social links allowed")
    for index, link in enumerate(social_links):
        if _is_blank(link.name) or _is_blank(link.url):
            issue(f"social_links[{index}]", "Social link needs a name and a URL")
        elif not is_safe_url(link.url):
            issue(f"social_links[{index}].url", f"Unsupported link {link.url!r}")

    return issues
