"""Section renderers.

Each renderer turns one section's props into an HTML fragment. Renderers never
raise for content problems: items missing required fields are skipped and a
section with nothing to show renders as an empty fragment. The hero renderer
additionally reads page-level state (logo, social links) through
:class:`HeroContext`.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from folio.document.models import (
    BlockLayout,
    GalleryProps,
    HeroProps,
    HeroSlide,
    LinksProps,
    Logo,
    NewsProps,
    PageConfig,
    SocialLink,
    VideoProps,
)
from folio.document.validation import is_safe_url, is_valid_item
from folio.rendering.video import aspect_padding, resolve_embed

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
# Link targets that fail the scheme check render as plain content
env.filters["safe_href"] = lambda url: url if is_safe_url(url) else None

EMPTY = Markup("")

DEFAULT_HERO_HEIGHT_VH = 150
DEFAULT_AUTOPLAY_INTERVAL = 5
DEFAULT_TRANSITION_DURATION = 0.8


@dataclass(frozen=True)
class HeroContext:
    """Page-level state drawn inside the hero block."""

    logo: Logo | None = None
    show_logo: bool = True
    social_links: Sequence[SocialLink] = ()
    show_social_links: bool = True
    show_thumb_strip: bool = True
    default_slides: Sequence[HeroSlide] = ()

    @classmethod
    def from_page(cls, config: PageConfig, default_slides: Sequence[HeroSlide] = ()) -> "HeroContext":
        return cls(
            logo=config.logo,
            show_logo=config.show_logo is not False,
            social_links=[
                link for link in config.social_links or [] if link.enabled and is_safe_url(link.url)
            ],
            show_social_links=config.show_social_links is not False,
            show_thumb_strip=config.show_hero_thumb_strip is not False,
            default_slides=tuple(default_slides),
        )


def hex_to_rgba(color: str | None, opacity: float | None) -> str | None:
    """``#rrggbb`` plus an opacity as a CSS ``rgba()`` value."""
    if not color:
        return None
    if opacity is None or len(color) != 7 or not color.startswith("#"):
        return color
    try:
        red, green, blue = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    except ValueError:
        return color
    return f"rgba({red}, {green}, {blue}, {opacity:g})"


def block_style(layout: BlockLayout | None) -> str:
    """Inline style for the padded content blocks of news and video sections."""
    if layout is None:
        return ""
    rules = []
    if layout.padding_y is not None:
        rules.append(f"padding-top: {layout.padding_y}px; padding-bottom: {layout.padding_y}px")
    background = hex_to_rgba(layout.background_color, layout.background_opacity)
    if background:
        rules.append(f"background-color: {background}")
    if layout.max_width:
        rules.append(f"max-width: {layout.max_width}")
    return "; ".join(rules)


def _render(name: str, **context) -> Markup:
    return Markup(env.get_template(f"sections/{name}.html").render(**context))


def render_hero(props: HeroProps, section_id: str, context: HeroContext | None = None) -> Markup:
    """Render the hero carousel.

    An empty or fully incomplete slide list falls back to the context's
    default slides, so a hero never renders without imagery when defaults
    are configured.
    """
    context = context or HeroContext()
    slides = [slide for slide in props.slides if is_valid_item("hero", slide)]
    if not slides:
        slides = list(context.default_slides)

    layout = props.layout
    carousel = props.carousel
    height_vh = layout.height_vh if layout and layout.height_vh is not None else DEFAULT_HERO_HEIGHT_VH
    overlay = hex_to_rgba(layout.background_color, layout.background_opacity) if layout else None

    return _render(
        "hero",
        section_id=section_id,
        slides=slides,
        title=props.title,
        subtitle=props.subtitle,
        height_vh=height_vh,
        overlay=overlay,
        autoplay_interval=(
            carousel.autoplay_interval
            if carousel and carousel.autoplay_interval is not None
            else DEFAULT_AUTOPLAY_INTERVAL
        ),
        transition_duration=(
            carousel.transition_duration
            if carousel and carousel.transition_duration is not None
            else DEFAULT_TRANSITION_DURATION
        ),
        logo=context.logo if context.show_logo and context.logo and context.logo.src else None,
        social_links=context.social_links if context.show_social_links else (),
        show_thumb_strip=context.show_thumb_strip and len(slides) > 1,
    )


def render_links(props: LinksProps, section_id: str) -> Markup:
    items = [item for item in props.items if is_safe_url(item.href)]
    if not items:
        return EMPTY
    return _render("links", section_id=section_id, items=items, layout=props.layout or "grid")


def render_gallery(props: GalleryProps, section_id: str) -> Markup:
    items = [item for item in props.items if is_valid_item("gallery", item)]
    if not items:
        return EMPTY
    return _render(
        "gallery",
        section_id=section_id,
        items=items,
        columns=props.columns or 3,
        gap=props.gap or "md",
    )


def render_news(props: NewsProps, section_id: str) -> Markup:
    items = [item for item in props.items if is_valid_item("news", item) and is_safe_url(item.href)]
    if not items:
        return EMPTY
    return _render("news", section_id=section_id, items=items, style=block_style(props.layout))


def render_video(props: VideoProps, section_id: str) -> Markup:
    """Render video players.

    Items with a blank URL are skipped. A URL that cannot be resolved to a
    supported platform renders as an inert placeholder.
    """
    videos = [(item, resolve_embed(item)) for item in props.items if item.url.strip()]
    if not videos:
        return EMPTY
    layout = props.layout
    display = props.display
    return _render(
        "video",
        section_id=section_id,
        videos=videos,
        padding=aspect_padding(layout.aspect_ratio if layout else None),
        style=block_style(layout),
        columns=display.columns if display and display.columns else 1,
        gap=display.gap if display and display.gap else "md",
    )
