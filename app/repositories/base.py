from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Holds the session factory used when a caller does not pass its own session."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, session: Optional[AsyncSession] = None) -> AsyncIterator[AsyncSession]:
        """Reuse ``session`` when given, otherwise run in a short-lived committed one."""

        if session is not None:
            yield session
            return

        async with self._session_factory() as own:
            async with own.begin():
                yield own
