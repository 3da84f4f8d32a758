"""Seed documents for brand-new pages."""

from typing import Literal

from folio.document.models import PageConfig

TemplateName = Literal["empty", "demo"]

_BLACK = {"type": "color", "value": "#000000"}

EMPTY_TEMPLATE: dict = {
    "background": _BLACK,
    "newsBackground": _BLACK,
    "blogBackground": _BLACK,
    "blogDetailBackground": _BLACK,
    "sections": [],
    "showHeroThumbStrip": True,
    "showLogo": True,
    "showSocialLinks": True,
}

DEMO_TEMPLATE: dict = {
    "background": _BLACK,
    "logo": {},
    "socialLinks": [
        {"id": "social-1", "name": "Twitter", "url": "https://twitter.com/example", "icon": "X", "enabled": True},
        {"id": "social-2", "name": "YouTube", "url": "https://youtube.com/example", "icon": "YT", "enabled": True},
        {"id": "social-3", "name": "GitHub", "url": "https://github.com/example", "icon": "GH", "enabled": True},
    ],
    "sections": [
        {
            "id": "hero-1",
            "type": "hero",
            "enabled": True,
            "order": 0,
            "props": {
                "slides": [
                    {"id": "slide-1", "src": "/static/hero/1.jpeg", "alt": "Hero 1"},
                    {"id": "slide-2", "src": "/static/hero/2.jpeg", "alt": "Hero 2"},
                    {"id": "slide-3", "src": "/static/hero/3.jpeg", "alt": "Hero 3"},
                ],
                "title": "Welcome",
                "subtitle": "My Personal Page",
            },
        },
        {
            "id": "links-1",
            "type": "links",
            "enabled": True,
            "order": 1,
            "props": {
                "items": [
                    {"id": "link-1", "label": "Twitter", "href": "https://twitter.com/example", "icon": "🐦"},
                    {"id": "link-2", "label": "YouTube", "href": "https://youtube.com/example", "icon": "📺"},
                    {"id": "link-3", "label": "GitHub", "href": "https://github.com/example", "icon": "💻"},
                ],
                "layout": "grid",
            },
        },
        {
            "id": "gallery-1",
            "type": "gallery",
            "enabled": True,
            "order": 2,
            "props": {"items": [], "columns": 3, "gap": "md"},
        },
    ],
    "showHeroThumbStrip": True,
    "showLogo": True,
    "showSocialLinks": True,
    "meta": {"title": "My Page", "description": "Welcome to my personal page"},
}

_TEMPLATES: dict[str, dict] = {"empty": EMPTY_TEMPLATE, "demo": DEMO_TEMPLATE}


def get_template(name: TemplateName = "empty") -> PageConfig:
    """Build a fresh seed document.

    Each call returns a new object, so callers never share state through a
    template.
    """
    try:
        document = _TEMPLATES[name]
    except KeyError:
        raise ValueError(f"Unknown page template: {name!r}") from None
    return PageConfig.from_document(document)


def empty_page() -> PageConfig:
    return get_template("empty")


def demo_page() -> PageConfig:
    return get_template("demo")
