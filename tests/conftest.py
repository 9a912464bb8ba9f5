"""
Snippetbox: Test Configuration (conftest.py)
============================================

Shared fixtures. Tests run against an in-memory SQLite database through
aiosqlite, so no database server is needed.

Fixture Hierarchy (all function-scoped):
    engine           in-memory engine opened through open_db, schema created
    snippet_service  SnippetService over that engine
    templates        the real template cache shipped with the package
    application      Application context wired from the above
    test_client      httpx AsyncClient talking to create_app(application)
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from snippetbox.application import Application
from snippetbox.config import PACKAGE_ROOT
from snippetbox.database import Base, open_db
from snippetbox.main import create_app
from snippetbox.services.snippet_service import SnippetService
from snippetbox.templating import new_template_cache

TEMPLATE_DIR = PACKAGE_ROOT / "ui" / "html"


@pytest_asyncio.fixture
async def engine():
    # StaticPool keeps one connection, so every session sees the same
    # in-memory database.
    engine = await open_db("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def snippet_service(engine):
    return SnippetService(engine)


@pytest.fixture
def templates():
    return new_template_cache(TEMPLATE_DIR)


@pytest.fixture
def application(snippet_service, templates):
    return Application(
        logger=logging.getLogger("snippetbox.test"),
        debug=False,
        snippets=snippet_service,
        templates=templates,
    )


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession usable as ``async with factory() as session``.

    Usage:
        service._session_factory = MagicMock(return_value=mock_db_session)
        mock_db_session.commit.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.__aenter__.return_value = session
    session.__aexit__.return_value = False
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(application):
    app = create_app(application)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
