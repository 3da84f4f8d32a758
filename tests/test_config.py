"""Tests for settings loading."""

import pytest

from folio.config import (
    PagesConfig,
    build_settings,
    interpolate_env_vars,
    load_app_config,
)


class TestInterpolateEnvVars:
    def test_nested_values(self, monkeypatch):
        monkeypatch.setenv("FOLIO_TEST_DB", "sqlite+aiosqlite:///x.db")

        result = interpolate_env_vars({"db": {"url": "$FOLIO_TEST_DB"}, "items": ["$FOLIO_TEST_DB", 3]})

        assert result == {"db": {"url": "sqlite+aiosqlite:///x.db"}, "items": ["sqlite+aiosqlite:///x.db", 3]}

    def test_braced_reference(self, monkeypatch):
        monkeypatch.setenv("FOLIO_TEST_HOST", "cdn.example.com")

        assert interpolate_env_vars("https://${FOLIO_TEST_HOST}/img") == "https://cdn.example.com/img"

    def test_missing_variable(self, monkeypatch):
        monkeypatch.delenv("FOLIO_TEST_MISSING", raising=False)

        with pytest.raises(ValueError, match="FOLIO_TEST_MISSING"):
            interpolate_env_vars("$FOLIO_TEST_MISSING")


class TestLoadAppConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_app_config(tmp_path / "app.yaml")

    def test_reads_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FOLIO_TEST_PATH", "/srv/uploads")
        path = tmp_path / "app.yaml"
        path.write_text("storage:\n  local_path: $FOLIO_TEST_PATH\npages:\n  seed_template: demo\n")

        assert load_app_config(path) == {
            "storage": {"local_path": "/srv/uploads"},
            "pages": {"seed_template": "demo"},
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text("")

        assert load_app_config(path) == {}


class TestBuildSettings:
    def test_defaults(self):
        settings = build_settings()

        assert settings.pages == PagesConfig()
        assert settings.pages.default_hero_slides[0].src == "/static/hero/1.jpeg"

    def test_yaml_sections_overlay(self):
        settings = build_settings({
            "debug": True,
            "pages": {"seed_template": "demo", "max_sections": 5},
            "storage": {"url_prefix": "/media"},
        })

        assert settings.debug is True
        assert settings.pages.seed_template == "demo"
        assert settings.pages.max_sections == 5
        assert settings.storage.url_prefix == "/media"
        assert settings.db.url.startswith("sqlite+aiosqlite")
