"""
Snippetbox: Snippet Service (data access)
=========================================

What:  Insert, fetch and list snippets.
Why:   The only component with domain logic. Keeping it free of HTTP lets
       handlers stay thin and lets tests drive it directly.
How:   Each call opens its own ``AsyncSession`` from the shared engine, so
       concurrent requests never share a session.

Error Handling Strategy:
    - A missing or expired row becomes ``NotFoundError``.
    - Any SQLAlchemy failure becomes ``DatabaseError`` with the driver detail
      kept in ``context`` for the log.
    Handlers rely on this split to answer 404 rather than 500.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from snippetbox.database import make_session_factory
from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import MAX_SNIPPET_ID, Snippet
from snippetbox.schemas.snippet import SnippetRecord

logger = logging.getLogger(__name__)

# Number of snippets shown on the home page.
LATEST_LIMIT = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetService:
    """Data-access component for the ``snippets`` table."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    async def insert(self, title: str, content: str, expires: timedelta) -> int:
        """
        Store a new snippet that lives for ``expires`` from now.

        Returns:
            The id assigned by the store.

        Raises:
            DatabaseError: the insert failed.
        """
        created = utcnow()
        snippet = Snippet(
            title=title,
            content=content,
            created=created,
            expires=created + expires,
        )
        try:
            async with self._session_factory() as session:
                session.add(snippet)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Could not save the snippet",
                context={"operation": "insert", "error": str(e)},
            ) from e

        logger.debug("Snippet inserted", extra={"snippet_id": snippet.id})
        return snippet.id

    async def get(self, snippet_id: int) -> SnippetRecord:
        """
        Fetch one unexpired snippet.

        Raises:
            NotFoundError: no row with this id, or it has expired.
            DatabaseError: the query failed.
        """
        # Ids outside the column range can never have been assigned.
        if not 1 <= snippet_id <= MAX_SNIPPET_ID:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)

        query = select(Snippet).where(Snippet.id == snippet_id, Snippet.expires > utcnow())
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                snippet = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Could not retrieve the snippet",
                context={"operation": "get", "snippet_id": snippet_id, "error": str(e)},
            ) from e

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)

        return SnippetRecord.model_validate(snippet)

    async def latest(self, limit: int = LATEST_LIMIT) -> List[SnippetRecord]:
        """
        The most recently created unexpired snippets, newest first.

        Query plan:
            SELECT ... WHERE expires > :now ORDER BY created DESC, id DESC LIMIT :limit
            The id tie-break keeps the order total when two rows share a timestamp.
        """
        query = (
            select(Snippet)
            .where(Snippet.expires > utcnow())
            .order_by(desc(Snippet.created), desc(Snippet.id))
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                snippets = result.scalars().all()
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Could not retrieve snippets",
                context={"operation": "latest", "error": str(e)},
            ) from e

        return [SnippetRecord.model_validate(snippet) for snippet in snippets]

    async def close(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
