"""Tests for the composition engine."""

import logging

import pytest

from folio.config import HeroSlideDefault
from folio.document.models import HeroSection
from folio.rendering.composer import ComposedSection, compose, render_page, to_hero_slides
from folio.rendering.renderers import render_gallery, render_links


def _ids(composed: list[ComposedSection]) -> list[str]:
    return [item.section.id for item in composed]


class TestOrdering:
    def test_hero_is_always_first(self, make_page):
        config = make_page(
            {"id": "links-1", "type": "links", "order": 0},
            {"id": "gallery-1", "type": "gallery", "order": 1},
            {"id": "hero-1", "type": "hero", "order": 99},
        )

        assert _ids(compose(config)) == ["hero-1", "links-1", "gallery-1"]

    @pytest.mark.parametrize("hero_order", [-5, 0, 3, 1000])
    def test_hero_pinning_ignores_its_order(self, make_page, hero_order):
        config = make_page(
            {"id": "news-1", "type": "news", "order": 0},
            {"id": "hero-1", "type": "hero", "order": hero_order},
        )

        assert _ids(compose(config))[0] == "hero-1"

    def test_disabled_sections_are_excluded(self, make_page):
        config = make_page(
            {"id": "hero-1", "type": "hero", "enabled": False},
            {"id": "links-1", "type": "links", "enabled": True},
            {"id": "video-1", "type": "video", "enabled": False},
        )

        assert _ids(compose(config)) == ["links-1"]
        # The document itself still carries them
        assert len(config.sections) == 3

    def test_equal_orders_keep_document_position(self, make_page):
        config = make_page(
            {"id": "b", "type": "gallery", "order": 2},
            {"id": "a", "type": "links", "order": 2},
            {"id": "c", "type": "news", "order": 1},
        )

        assert _ids(compose(config)) == ["c", "b", "a"]

    def test_mixed_orders_and_enabled_flags(self, make_page):
        config = make_page(
            {"id": "hero-1", "type": "hero", "order": 5, "enabled": True},
            {"id": "gallery-1", "type": "gallery", "order": 1, "enabled": True},
            {"id": "news-1", "type": "news", "order": 2, "enabled": False},
        )

        assert _ids(compose(config)) == ["hero-1", "gallery-1"]


class TestDispatch:
    def test_unknown_sections_are_dropped_with_warning(self, make_page, caplog):
        config = make_page(
            {"id": "map-1", "type": "map", "enabled": True},
            {"id": "links-1", "type": "links"},
        )

        with caplog.at_level(logging.WARNING, logger="folio.rendering.composer"):
            composed = compose(config)

        assert _ids(composed) == ["links-1"]
        assert "map-1" in caplog.text

    def test_malformed_section_does_not_break_the_page(self, make_page):
        config = make_page(
            {"id": "gallery-1", "type": "gallery", "props": {"items": 12}},
            {"id": "links-1", "type": "links"},
        )

        assert _ids(compose(config)) == ["links-1"]

    def test_duplicate_hero_is_dropped(self, make_page, caplog):
        config = make_page(
            {"id": "hero-1", "type": "hero", "order": 0},
            {"id": "hero-2", "type": "hero", "order": 0},
        )

        with caplog.at_level(logging.WARNING, logger="folio.rendering.composer"):
            composed = compose(config)

        assert _ids(composed) == ["hero-1"]
        assert "hero-2" in caplog.text

    def test_duplicate_hero_stays_hidden_when_first_is_disabled(self, make_page):
        config = make_page(
            {"id": "hero-1", "type": "hero", "enabled": False},
            {"id": "hero-2", "type": "hero"},
        )

        assert compose(config) == []

    def test_renderer_matches_section_type(self, make_page):
        config = make_page({"id": "links-1", "type": "links"}, {"id": "gallery-1", "type": "gallery", "order": 1})

        composed = compose(config)

        assert composed[0].renderer is render_links
        assert composed[1].renderer is render_gallery


class TestColSpan:
    def test_col_span_defaults_to_full_width(self, make_page):
        config = make_page({"id": "links-1", "type": "links"})

        assert compose(config)[0].col_span == 4

    def test_col_span_is_passed_through(self, make_page):
        config = make_page({"id": "links-1", "type": "links", "layout": {"colSpan": 2}})

        assert compose(config)[0].col_span == 2

    def test_hero_is_forced_full_width(self, make_page):
        config = make_page({"id": "hero-1", "type": "hero", "layout": {"colSpan": 1}})

        composed = compose(config)

        assert isinstance(composed[0].section, HeroSection)
        assert composed[0].col_span == 4


class TestRenderPage:
    def test_renders_sections_in_order(self, make_page):
        config = make_page(
            {"id": "links-1", "type": "links", "order": 2, "props": {"items": [{"id": "l", "label": "Blog", "href": "/blog"}]}},
            {"id": "hero-1", "type": "hero", "order": 9, "props": {"title": "Hello"}},
            meta={"title": "Alice"},
        )

        html = render_page(config, [HeroSlideDefault(src="/static/hero/1.jpeg")])

        assert html.index('data-section-id="hero-1"') < html.index('data-section-id="links-1"')
        assert "<title>Alice</title>" in html
        assert "/static/hero/1.jpeg" in html

    def test_sections_rendering_nothing_take_no_cell(self, make_page):
        config = make_page({"id": "gallery-1", "type": "gallery", "layout": {"colSpan": 2}})

        html = render_page(config)

        assert "grid-column: span 2" not in html

    def test_image_background(self, make_page):
        config = make_page(background={"type": "image", "value": "/bg's.jpg"})

        html = render_page(config)

        assert "background-image: url(&#39;/bg%27s.jpg&#39;)" in html


def test_to_hero_slides_converts_configured_defaults():
    slides = to_hero_slides([HeroSlideDefault(src="/a.jpg", alt="A")])

    assert slides[0].src == "/a.jpg"
    assert slides[0].alt == "A"
    assert slides[0].id == "default-1"
