"""Turn page documents into HTML."""

from folio.rendering.composer import ComposedSection, compose, render_page
from folio.rendering.renderers import HeroContext

__all__ = ["ComposedSection", "HeroContext", "compose", "render_page"]
