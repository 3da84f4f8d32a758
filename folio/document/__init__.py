from folio.document.models import (
    SECTION_CLASSES,
    SECTION_TYPES,
    GallerySection,
    HeroSection,
    LinksSection,
    NewsSection,
    PageConfig,
    SectionBase,
    UnknownSection,
    VideoSection,
)
from folio.document.templates import demo_page, empty_page, get_template
from folio.document.validation import assert_clean, check_submission, clean_page_config

__all__ = [
    "GallerySection",
    "HeroSection",
    "LinksSection",
    "NewsSection",
    "PageConfig",
    "SECTION_CLASSES",
    "SECTION_TYPES",
    "SectionBase",
    "UnknownSection",
    "VideoSection",
    "assert_clean",
    "check_submission",
    "clean_page_config",
    "demo_page",
    "empty_page",
    "get_template",
]
