"""Shared pytest fixtures."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import folio.db.models  # noqa: F401 - register models on Base
from folio.db.base import Base
from folio.document.models import PageConfig
from folio.lib.hooks import hooks


@pytest.fixture
def clean_hooks():
    """Save and restore hooks state around a test."""
    original_filters = {name: list(handlers) for name, handlers in hooks._filters.items()}
    original_actions = {name: list(handlers) for name, handlers in hooks._actions.items()}
    yield hooks
    hooks._filters.clear()
    hooks._filters.update(original_filters)
    hooks._actions.clear()
    hooks._actions.update(original_actions)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """A file-backed SQLite engine with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'folio-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_page():
    """Factory for page documents with the given sections."""

    def _make(*sections: dict, **fields) -> PageConfig:
        return PageConfig.from_document({"sections": list(sections), **fields})

    return _make
