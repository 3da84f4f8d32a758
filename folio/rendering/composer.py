"""Composition engine: turn a page document into an ordered list of renderable sections.

Composition runs in three steps:

1. Drop disabled sections.
2. Stable-sort: the hero goes first whatever its ``order``; the rest sort by
   ``order`` ascending, ties keeping their position in the document.
3. Resolve a renderer per section type. Sections this version cannot render
   are dropped with a warning.

Only the first hero in the document is ever rendered. Any later hero is a
stray duplicate and is dropped, even when the first hero is disabled.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any, assert_never
from urllib.parse import quote

from markupsafe import Markup

from folio.config import HeroSlideDefault
from folio.document.models import (
    FULL_WIDTH,
    GallerySection,
    HeroSection,
    HeroSlide,
    KnownSection,
    LinksSection,
    NewsSection,
    PageConfig,
    UnknownSection,
    VideoSection,
)
from folio.rendering.renderers import (
    HeroContext,
    env,
    render_gallery,
    render_hero,
    render_links,
    render_news,
    render_video,
)

logger = logging.getLogger(__name__)

Renderer = Callable[[Any, str], Markup]

_URL_SAFE = ":/?#[]@!$&()*+,;=%-._~"


@dataclass(frozen=True)
class ComposedSection:
    """A section paired with its renderer and grid width."""

    section: KnownSection
    renderer: Renderer
    col_span: int

    def render(self) -> Markup:
        return self.renderer(self.section.props, self.section.id)


def _sort_key(indexed: tuple[int, KnownSection]) -> tuple[int, int, int]:
    position, section = indexed
    if isinstance(section, HeroSection):
        return (0, 0, position)
    return (1, section.order, position)


def resolve_renderer(section: KnownSection, hero_context: HeroContext) -> Renderer:
    """Pick the renderer for a section by its type."""
    match section:
        case HeroSection():
            return partial(render_hero, context=hero_context)
        case LinksSection():
            return render_links
        case GallerySection():
            return render_gallery
        case NewsSection():
            return render_news
        case VideoSection():
            return render_video
        case _:
            assert_never(section)


def to_hero_slides(defaults: Sequence[HeroSlideDefault | HeroSlide]) -> list[HeroSlide]:
    """Convert configured fallback slides into document slides."""
    return [
        slide if isinstance(slide, HeroSlide) else HeroSlide(id=f"default-{index}", src=slide.src, alt=slide.alt)
        for index, slide in enumerate(defaults, start=1)
    ]


def compose(
    config: PageConfig,
    default_slides: Sequence[HeroSlideDefault | HeroSlide] = (),
) -> list[ComposedSection]:
    """Filter, order and dispatch the sections of ``config``.

    Args:
        config: The page document
        default_slides: Fallback slides for a hero without usable slides

    Returns:
        Renderable sections in display order
    """
    known: list[tuple[int, KnownSection]] = []
    seen_hero = False
    for position, section in enumerate(config.sections):
        if isinstance(section, UnknownSection):
            if section.enabled:
                logger.warning(
                    "Skipping section %r with unsupported type %r", section.id, section.type
                )
            continue
        if isinstance(section, HeroSection):
            if seen_hero:
                logger.warning("Skipping duplicate hero section %r", section.id)
                continue
            seen_hero = True
        if section.enabled:
            known.append((position, section))

    hero_context = HeroContext.from_page(config, to_hero_slides(default_slides))
    composed = []
    for _, section in sorted(known, key=_sort_key):
        col_span = FULL_WIDTH if isinstance(section, HeroSection) else section.col_span
        composed.append(
            ComposedSection(
                section=section,
                renderer=resolve_renderer(section, hero_context),
                col_span=col_span,
            )
        )
    return composed


def background_style(config: PageConfig) -> str:
    background = config.background
    if background.type == "color":
        return f"background-color: {background.value}"
    return (
        f"background-image: url('{quote(background.value, safe=_URL_SAFE)}'); background-size: cover; "
        "background-position: center; background-repeat: no-repeat"
    )


def page_context(config: PageConfig, composed: Sequence[ComposedSection], preview: bool = False) -> dict[str, Any]:
    """Template context for ``page.html``.

    Sections rendering to an empty fragment take no grid cell.
    """
    cells = []
    for item in composed:
        html = item.render()
        if html:
            cells.append({"id": item.section.id, "col_span": item.col_span, "html": html})
    return {
        "cells": cells,
        "background_style": background_style(config),
        "meta": config.meta,
        "preview": preview,
    }


def render_page(
    config: PageConfig,
    default_slides: Sequence[HeroSlideDefault | HeroSlide] = (),
    preview: bool = False,
) -> str:
    """Render a whole page document to an HTML string."""
    composed = compose(config, default_slides)
    return env.get_template("page.html").render(**page_context(config, composed, preview))
