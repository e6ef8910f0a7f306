from __future__ import annotations

import logging

from app.database import TransactionManager
from app.models.event import Event
from app.repositories.event_repository import CreateEventParams, EventRepository

_LOGGER = logging.getLogger(__name__)


class EventService:
    """Use cases for the events resource."""

    def __init__(self, transaction_manager: TransactionManager, event_repository: EventRepository) -> None:
        self.transaction_manager = transaction_manager
        self.event_repository = event_repository

    async def get_events(self) -> list[Event]:
        return await self.event_repository.find_many()

    async def create_event(self, params: CreateEventParams) -> Event:
        """Create an event inside its own transaction."""

        async def _create(session):
            return await self.event_repository.create(params, session)

        event = await self.transaction_manager.execute(_create)
        _LOGGER.debug("Created event %s", event.id)
        return event
