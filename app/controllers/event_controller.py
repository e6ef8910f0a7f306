from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from app.controllers.base import BaseController, Result
from app.models.event import Event
from app.repositories.event_repository import CreateEventParams
from app.schemas import CreateEventRequest, EventRead
from app.services.event_service import EventService
from app.utils.dates import parse_iso
from app.utils.validation import validate_request_body


def _serialize(event: Event) -> dict:
    return EventRead.model_validate(event).model_dump(by_alias=True)


class EventController(BaseController):
    def __init__(self, event_service: EventService) -> None:
        self.event_service = event_service

    async def get_events(self, request: Request) -> JSONResponse:
        async def _handle() -> Result[list[dict]]:
            events = await self.event_service.get_events()
            return Result(data=[_serialize(event) for event in events])

        return await self.handle_request(request, _handle)

    async def create_event(self, request: Request) -> JSONResponse:
        async def _handle() -> Result[dict]:
            payload = await validate_request_body(request, CreateEventRequest)
            event = await self.event_service.create_event(
                CreateEventParams(
                    name=payload.name,
                    description=payload.description,
                    event_start_datetime=parse_iso(payload.event_start_datetime),
                    event_end_datetime=parse_iso(payload.event_end_datetime),
                    capacity=payload.capacity,
                )
            )
            return Result(data=_serialize(event), status=201)

        return await self.handle_request(request, _handle)
