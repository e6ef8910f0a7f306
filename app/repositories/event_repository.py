from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import new_session
from app.models.event import Event
from app.repositories.base import BaseRepository


@dataclass(slots=True)
class CreateEventParams:
    name: str
    description: Optional[str]
    event_start_datetime: datetime
    event_end_datetime: datetime
    capacity: int


class EventRepository(BaseRepository):
    def __init__(self, session_factory: Callable[[], AsyncSession] = new_session) -> None:
        super().__init__(session_factory)

    async def create(self, params: CreateEventParams, session: Optional[AsyncSession] = None) -> Event:
        """Insert one event and return it with its generated id and timestamps."""

        async with self._session(session) as db:
            event = Event(
                name=params.name,
                description=params.description,
                event_start_datetime=params.event_start_datetime,
                event_end_datetime=params.event_end_datetime,
                capacity=params.capacity,
            )
            db.add(event)
            await db.flush()
            await db.refresh(event)
            return event

    async def find_many(self, session: Optional[AsyncSession] = None) -> list[Event]:
        async with self._session(session) as db:
            result = await db.execute(select(Event).order_by(Event.id))
            return list(result.scalars().all())
