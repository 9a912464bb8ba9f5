"""
Snippetbox: Snippet Service Tests
=================================

Runs SnippetService against in-memory SQLite.

What we test:
    ✅ insert returns the store-assigned id and get reads it back
    ✅ expires - created equals the chosen lifetime
    ✅ missing, expired and out-of-range ids raise NotFoundError, never DatabaseError
    ✅ latest is bounded, skips expired rows, newest first
    ✅ store failures surface as DatabaseError
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from snippetbox.database import Base, make_session_factory
from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import MAX_SNIPPET_ID, Snippet
from snippetbox.services.snippet_service import LATEST_LIMIT


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored value is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def add_expired(engine, title="Old news"):
    now = datetime.now(timezone.utc)
    async with make_session_factory(engine)() as session:
        snippet = Snippet(
            title=title,
            content="gone",
            created=now - timedelta(days=2),
            expires=now - timedelta(days=1),
        )
        session.add(snippet)
        await session.commit()
        return snippet.id


class TestInsertAndGet:

    @pytest.mark.asyncio
    async def test_insert_then_get(self, snippet_service):
        before = datetime.now(timezone.utc)
        snippet_id = await snippet_service.insert("Test", "Hello", timedelta(days=7))

        assert snippet_id == 1

        snippet = await snippet_service.get(snippet_id)
        assert snippet.id == 1
        assert snippet.title == "Test"
        assert snippet.content == "Hello"

        created = as_utc(snippet.created)
        expires = as_utc(snippet.expires)
        assert expires - created == timedelta(days=7)
        assert before - timedelta(seconds=5) <= created <= datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_ids_are_assigned_sequentially(self, snippet_service):
        first = await snippet_service.insert("One", "1", timedelta(days=1))
        second = await snippet_service.insert("Two", "2", timedelta(days=1))
        assert second > first

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, snippet_service):
        with pytest.raises(NotFoundError) as exc_info:
            await snippet_service.get(999)
        assert exc_info.value.context["resource_id"] == "999"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("snippet_id", [0, -1, MAX_SNIPPET_ID + 1, 10**20])
    async def test_get_out_of_range_raises_not_found(self, snippet_service, snippet_id):
        with pytest.raises(NotFoundError) as exc_info:
            await snippet_service.get(snippet_id)
        assert exc_info.value.context["resource_id"] == str(snippet_id)

    @pytest.mark.asyncio
    async def test_get_out_of_range_skips_the_store(self, snippet_service, mock_db_session):
        snippet_service._session_factory = MagicMock(return_value=mock_db_session)

        with pytest.raises(NotFoundError):
            await snippet_service.get(10**20)
        snippet_service._session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_expired_raises_not_found(self, engine, snippet_service):
        expired_id = await add_expired(engine)

        with pytest.raises(NotFoundError):
            await snippet_service.get(expired_id)

    @pytest.mark.asyncio
    async def test_get_store_failure_is_database_error(self, engine, snippet_service):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        with pytest.raises(DatabaseError) as exc_info:
            await snippet_service.get(1)
        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.context["operation"] == "get"

    @pytest.mark.asyncio
    async def test_insert_commit_failure_is_database_error(self, snippet_service, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError(
            "INSERT INTO snippets", {}, Exception("connection lost")
        )
        snippet_service._session_factory = MagicMock(return_value=mock_db_session)

        with pytest.raises(DatabaseError, match="Could not save"):
            await snippet_service.insert("Test", "Hello", timedelta(days=1))
        mock_db_session.add.assert_called_once()


class TestLatest:

    @pytest.mark.asyncio
    async def test_latest_empty(self, snippet_service):
        assert await snippet_service.latest() == []

    @pytest.mark.asyncio
    async def test_latest_is_bounded_and_newest_first(self, snippet_service):
        for i in range(LATEST_LIMIT + 2):
            await snippet_service.insert(f"Snippet {i}", "body", timedelta(days=7))

        snippets = await snippet_service.latest()

        assert len(snippets) == LATEST_LIMIT
        assert [s.id for s in snippets] == list(range(LATEST_LIMIT + 2, 2, -1))
        created = [as_utc(s.created) for s in snippets]
        assert created == sorted(created, reverse=True)

    @pytest.mark.asyncio
    async def test_latest_respects_custom_limit(self, snippet_service):
        for i in range(3):
            await snippet_service.insert(f"Snippet {i}", "body", timedelta(days=1))

        assert len(await snippet_service.latest(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_latest_skips_expired(self, engine, snippet_service):
        expired_id = await add_expired(engine)
        live_id = await snippet_service.insert("Fresh", "body", timedelta(days=1))

        snippets = await snippet_service.latest()

        ids = [s.id for s in snippets]
        assert live_id in ids
        assert expired_id not in ids
        now = datetime.now(timezone.utc)
        assert all(as_utc(s.expires) > now for s in snippets)

    @pytest.mark.asyncio
    async def test_latest_store_failure_is_database_error(self, engine, snippet_service):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        with pytest.raises(DatabaseError):
            await snippet_service.latest()
