"""Application factory: wires the database, sessions, templates and controllers."""

import hashlib
import logging
from pathlib import Path
from typing import Any

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import (
    AsyncSessionConfig,
    SQLAlchemyAsyncConfig,
    SQLAlchemyPlugin,
)
from litestar import Litestar
from litestar.contrib.jinja import JinjaTemplateEngine
from litestar.middleware.session.client_side import CookieBackendConfig
from litestar.static_files import create_static_files_router
from litestar.template import TemplateConfig

from folio.config import Settings, get_settings
from folio.controllers import PageApiController, PageWebController
from folio.db.base import Base
from folio.lib.exceptions import EXCEPTION_HANDLERS
from folio.lib.storage import LocalStorageBackend
from folio.rendering.renderers import TEMPLATE_DIR

logger = logging.getLogger(__name__)


def create_session_config(secret_key: str, secure: bool = False, max_age: int = 86400) -> CookieBackendConfig:
    """Signed cookie sessions carrying the owner identity."""
    return CookieBackendConfig(
        secret=hashlib.sha256(secret_key.encode()).digest(),
        key="folio_session",
        max_age=max_age,
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def create_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    db = settings.db
    engine_options: dict[str, Any] = {"echo": db.echo}
    # Pool sizing is only passed for server databases
    if not db.url.startswith("sqlite"):
        engine_options.update(
            pool_size=db.pool_size,
            max_overflow=db.pool_overflow,
            pool_timeout=db.pool_timeout,
            pool_pre_ping=db.pool_pre_ping,
        )

    return SQLAlchemyAsyncConfig(
        connection_string=db.url,
        metadata=Base.metadata,
        create_all=db.create_all,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=EngineConfig(**engine_options),
    )


def create_app(settings: Settings | None = None) -> Litestar:
    """Build the Litestar application.

    Args:
        settings: Settings to use; loaded from ``.env`` and ``app.yaml`` when omitted
    """
    settings = settings or get_settings()
    db_config = create_db_config(settings)
    session_config = create_session_config(settings.secret_key, secure=not settings.debug)

    upload_dir = Path(settings.storage.local_path)
    storage = LocalStorageBackend(upload_dir, settings.storage.url_prefix)

    async def on_startup(_app: Litestar) -> None:
        upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Serving uploads from %s at %s", upload_dir, settings.storage.url_prefix)

    app = Litestar(
        on_startup=[on_startup],
        route_handlers=[
            PageApiController,
            PageWebController,
            create_static_files_router(
                path=settings.storage.url_prefix,
                directories=[upload_dir],
                name="uploads",
            ),
        ],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        middleware=[session_config.middleware],
        template_config=TemplateConfig(directory=TEMPLATE_DIR, engine=JinjaTemplateEngine),
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.storage = storage
    return app
