"""Application settings.

Scalar settings come from the environment and ``.env``. The nested ``db``,
``pages`` and ``storage`` sections can be overridden by an ``app.yaml`` in the
working directory, whose string values may reference environment variables
as ``$NAME`` or ``${NAME}``.
"""

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv(Path(__file__).parent.parent / ".env")

CONFIG_FILE_NAME = "app.yaml"

_ENV_REFERENCE = re.compile(r"\$(?:\{([A-Z_][A-Z0-9_]*)\}|([A-Z_][A-Z0-9_]*))")


def _env_value(match: re.Match) -> str:
    name = match.group(1) or match.group(2)
    try:
        return os.environ[name]
    except KeyError:
        raise ValueError(f"Environment variable ${name} not set") from None


def interpolate_env_vars(value: Any) -> Any:
    """Substitute environment references in every string of a YAML tree."""
    match value:
        case str():
            return _ENV_REFERENCE.sub(_env_value, value)
        case dict():
            return {key: interpolate_env_vars(item) for key, item in value.items()}
        case list():
            return [interpolate_env_vars(item) for item in value]
        case _:
            return value


def get_config_path() -> Path:
    return Path.cwd() / CONFIG_FILE_NAME


def load_app_config(config_path: Path | None = None) -> dict:
    """Read ``app.yaml`` (or ``config_path``) with environment interpolation.

    Raises:
        FileNotFoundError: the file does not exist
    """
    path = config_path or get_config_path()
    try:
        raw = path.read_text()
    except FileNotFoundError:
        raise FileNotFoundError(f"{CONFIG_FILE_NAME} not found at {path}") from None
    return interpolate_env_vars(yaml.safe_load(raw) or {})


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///./folio.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True
    echo: bool = False
    # Create tables on startup instead of running migrations
    create_all: bool = False


class HeroSlideDefault(BaseModel):
    """One entry of the fallback hero slide set."""

    src: str
    alt: str = ""


class PagesConfig(BaseModel):
    """Page document configuration."""

    # Template used to seed a brand-new page on first access
    seed_template: Literal["empty", "demo"] = "empty"

    # Rendered when a hero section has no slides of its own
    default_hero_slides: list[HeroSlideDefault] = [
        HeroSlideDefault(src="/static/hero/1.jpeg", alt="hero 1"),
        HeroSlideDefault(src="/static/hero/2.jpeg", alt="hero 2"),
        HeroSlideDefault(src="/static/hero/3.jpeg", alt="hero 3"),
    ]

    # Limits enforced on submitted drafts
    max_sections: int = 20
    max_social_links: int = 10
    max_hero_slides: int = 10


class StorageConfig(BaseModel):
    """Local storage for uploaded page assets."""

    local_path: str = "./uploads"
    url_prefix: str = "/uploads"
    max_upload_size: int = 10 * 1024 * 1024
    allowed_content_types: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
    ]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    secret_key: str = "change-me"

    db: DatabaseConfig = DatabaseConfig()
    pages: PagesConfig = PagesConfig()
    storage: StorageConfig = StorageConfig()


_YAML_SECTIONS: dict[str, type[BaseModel]] = {
    "db": DatabaseConfig,
    "pages": PagesConfig,
    "storage": StorageConfig,
}


def build_settings(app_config: dict | None = None) -> Settings:
    """Environment settings with the YAML sections of ``app_config`` laid over them."""
    settings = Settings()
    app_config = app_config or {}

    overrides: dict[str, Any] = {
        name: model.model_validate(app_config[name])
        for name, model in _YAML_SECTIONS.items()
        if name in app_config
    }
    if "debug" in app_config:
        overrides["debug"] = bool(app_config["debug"])
    return settings.model_copy(update=overrides) if overrides else settings


@lru_cache
def get_settings() -> Settings:
    try:
        app_config = load_app_config()
    except FileNotFoundError:
        app_config = None
    return build_settings(app_config)
