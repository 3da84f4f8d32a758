"""Tests for the page document model."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from folio.document.models import (
    ColorBackground,
    GallerySection,
    HeroProps,
    HeroSection,
    ImageBackground,
    LinksSection,
    PageConfig,
    UnknownSection,
    VideoSection,
)


class TestReading:
    """Loading stored documents."""

    def test_camel_case_keys_map_to_attributes(self):
        config = PageConfig.from_document({
            "showHeroThumbStrip": False,
            "socialLinks": [{"id": "s1", "name": "GitHub", "url": "https://github.com/x"}],
            "sections": [{
                "id": "hero-1",
                "type": "hero",
                "props": {"slides": [{"id": "a", "src": "/a.jpg", "objectPosition": "top"}]},
                "layout": {"colSpan": 2},
            }],
        })

        assert config.show_hero_thumb_strip is False
        assert config.social_links[0].name == "GitHub"
        hero = config.sections[0]
        assert isinstance(hero, HeroSection)
        assert hero.props.slides[0].object_position == "top"
        assert hero.col_span == 2

    def test_missing_optional_fields_take_defaults(self):
        config = PageConfig.from_document({"sections": [{"id": "g", "type": "gallery"}]})

        section = config.sections[0]
        assert isinstance(section, GallerySection)
        assert section.enabled is True
        assert section.order == 0
        assert section.props.items == []
        assert section.col_span == 4
        assert isinstance(config.background, ColorBackground)
        assert config.background.value == "#000000"

    def test_empty_document_loads(self):
        config = PageConfig.from_document({})

        assert config.sections == []
        assert config.logo is None

    def test_image_background(self):
        config = PageConfig.from_document({"background": {"type": "image", "value": "/bg.jpg"}})

        assert isinstance(config.background, ImageBackground)
        assert config.background.value == "/bg.jpg"

    def test_each_section_type_loads_its_class(self):
        config = PageConfig.from_document({"sections": [
            {"id": "l", "type": "links", "props": {"items": [{"id": "1", "label": "a", "href": "/a"}]}},
            {"id": "v", "type": "video", "props": {"items": [{"id": "1", "url": "https://youtu.be/x"}]}},
        ]})

        assert isinstance(config.sections[0], LinksSection)
        assert isinstance(config.sections[1], VideoSection)
        assert config.sections[1].items[0].url == "https://youtu.be/x"


class TestForwardCompatibility:
    """Documents written by other versions keep loading."""

    def test_unknown_section_type_is_kept_opaque(self):
        raw = {"id": "map-1", "type": "map", "enabled": True, "order": 3, "props": {"lat": 1.5}}
        config = PageConfig.from_document({"sections": [raw]})

        section = config.sections[0]
        assert isinstance(section, UnknownSection)
        assert section.id == "map-1"
        assert section.type == "map"
        assert section.order == 3
        assert config.to_document()["sections"] == [raw]

    def test_malformed_props_quarantine_only_that_section(self):
        config = PageConfig.from_document({"sections": [
            {"id": "hero-1", "type": "hero", "props": {"slides": "not-a-list"}},
            {"id": "links-1", "type": "links"},
        ]})

        assert isinstance(config.sections[0], UnknownSection)
        assert isinstance(config.sections[1], LinksSection)

    def test_unknown_top_level_keys_survive_a_round_trip(self):
        config = PageConfig.from_document({"futureFlag": {"on": True}})

        assert config.to_document()["futureFlag"] == {"on": True}

    def test_non_object_section_entries_are_dropped(self):
        config = PageConfig.from_document({"sections": ["junk", {"id": "g", "type": "gallery"}]})

        assert [section.id for section in config.sections] == ["g"]


class TestWriting:
    def test_to_document_uses_camel_case_and_omits_nulls(self):
        config = PageConfig.from_document({
            "showLogo": True,
            "sections": [{"id": "n", "type": "news", "props": {"items": [
                {"id": "1", "src": "/a.jpg", "href": "/news/1"},
            ]}}],
        })

        document = config.to_document()
        assert document["showLogo"] is True
        assert "logo" not in document
        assert document["sections"][0]["props"]["items"][0] == {"id": "1", "src": "/a.jpg", "href": "/news/1"}

    def test_round_trip_is_stable(self):
        document = {
            "background": {"type": "color", "value": "#112233"},
            "sections": [{
                "id": "video-1",
                "type": "video",
                "enabled": False,
                "order": 2,
                "props": {
                    "items": [{"id": "v1", "url": "https://youtu.be/abc", "startTime": 12}],
                    "layout": {"aspectRatio": "4:3", "paddingY": 24},
                    "display": {"columns": 2},
                },
            }],
        }

        once = PageConfig.from_document(document).to_document()
        twice = PageConfig.from_document(once).to_document()
        assert once == twice
        assert once["sections"][0]["props"]["layout"] == {"paddingY": 24, "aspectRatio": "4:3"}


class TestImmutability:
    def test_models_are_frozen(self):
        config = PageConfig.from_document({})

        with pytest.raises(PydanticValidationError):
            config.show_logo = False

    def test_merged_returns_revalidated_copy(self):
        props = HeroProps(title="Old")

        merged = props.merged({"title": "New", "slides": [{"src": "/a.jpg"}]})

        assert merged.title == "New"
        assert merged.slides[0].src == "/a.jpg"
        assert merged.slides[0].id.startswith("slide-")
        assert props.title == "Old"

    def test_new_items_get_distinct_ids(self):
        first = HeroProps.model_validate({"slides": [{"src": "/a.jpg"}, {"src": "/b.jpg"}]})

        assert first.slides[0].id != first.slides[1].id

    def test_merged_accepts_camel_case_keys(self):
        config = PageConfig.from_document({"sections": [{"id": "hero-1", "type": "hero"}]})
        slide = config.sections[0].props.merged({"slides": [{"src": "/a.jpg"}]}).slides[0]

        assert slide.merged({"objectPosition": "left"}).object_position == "left"
