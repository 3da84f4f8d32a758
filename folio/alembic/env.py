"""Alembic environment for the pages database (async engine)."""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from folio.config import get_settings
from folio.db.base import Base
import folio.db.models  # noqa: F401 - register models on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """An explicit ``sqlalchemy.url`` option wins over the app settings."""
    return config.get_main_option("sqlalchemy.url") or get_settings().db.url


def _configure(url: str, **kwargs) -> None:
    # SQLite cannot ALTER most columns in place
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_offline(url: str) -> None:
    """Emit the migration SQL without connecting."""
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync, url)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline(database_url())
else:
    asyncio.run(run_online(database_url()))
